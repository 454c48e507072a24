import time

import orjson
import pandas as pd
import streamlit as st

from mojirec.engine import RecoveryOptions, default_engine
from mojirec.eval.harness import evaluate_synthetic
from mojirec.export import batch_to_records


def main() -> None:
    engine = default_engine()
    st.title("Mojibake Recovery")
    st.caption("Paste garbled text to rank candidate recoveries, score a string, or run a quick calibration.")
    st.info("Tip: use the CLI for files and logs; this UI is a quick way to try single strings.")
    st.session_state.setdefault("recover_logs", [])

    tabs = st.tabs(["Recover", "Batch", "Score", "Calibrate"])

    with tabs[0]:
        st.subheader("Recover")
        text = st.text_area("Garbled text", "ä¸­æ–‡ä¹±ç ", key="recover_text")
        strategy = st.selectbox("Strategy", engine.list_strategies(), index=1, key="recover_strategy")
        category = st.selectbox("Category", ["(any)", *engine.list_categories()], key="recover_category")
        max_results = st.number_input("Max results", min_value=1, max_value=100, value=10, step=1)
        min_credibility = st.slider("Min credibility", 0, 100, 30)
        use_recommended = st.checkbox("Use detector-narrowed pairs", value=True)

        if st.button("Recover") and text:
            options = RecoveryOptions(
                max_results=int(max_results),
                min_credibility=float(min_credibility),
                strategy=strategy,
                category=None if category == "(any)" else category,
                use_recommended=use_recommended,
            )
            st.write("Detected categories: " + ", ".join(engine.detect_categories(text)))
            start = time.time()
            results = engine.recover(text, options)
            elapsed = time.time() - start
            st.success(f"Recovery: {elapsed:.3f}s | results: {len(results)}")
            if results:
                table = pd.DataFrame(
                    [
                        {
                            "recovered_text": r.recovered_text,
                            "credibility": r.credibility,
                            "pair": f"{r.source_encoding} -> {r.target_encoding}",
                            "method": r.method,
                            "description": r.description,
                        }
                        for r in results
                    ]
                )
                st.dataframe(table, height=300)
                st.bar_chart(table.set_index("pair")["credibility"])
                st.markdown("**Best candidate details**")
                st.json(results[0].details.to_dict())
                st.download_button(
                    "Download JSON",
                    orjson.dumps([r.to_dict() for r in results]),
                    file_name="recover.json",
                )
            else:
                st.warning("No credible recovery found.")
            st.session_state["recover_logs"].append(
                {"text": text[:40], "strategy": strategy, "results": len(results), "seconds": elapsed}
            )
        if st.session_state["recover_logs"]:
            st.markdown("**Recent runs**")
            st.dataframe(pd.DataFrame(st.session_state["recover_logs"]).tail(5))

    with tabs[1]:
        st.subheader("Batch")
        uploaded = st.file_uploader("Upload a UTF-8 text file (one string per line)", type=["txt"])
        if uploaded:
            lines = [line for line in uploaded.read().decode("utf-8").splitlines() if line.strip()]
            if len(lines) > 500:
                st.warning("Large file; UI is intended for small samples, use the CLI for big runs.")
            items = engine.batch_recover(lines, {"max_results": 3})
            st.dataframe(pd.DataFrame(batch_to_records(items)))

    with tabs[2]:
        st.subheader("Score")
        candidate = st.text_input("Text to score", "中文乱码测试")
        if candidate:
            report = engine.score_text(candidate)
            st.metric("Credibility", f"{report.score:.2f}")
            st.json(report.to_dict())

    with tabs[3]:
        st.subheader("Calibrate")
        count = st.number_input("Samples", min_value=4, value=16, step=1)
        seed = st.number_input("Seed", min_value=0, value=1234, step=1)
        if st.button("Run synthetic evaluation"):
            payload = evaluate_synthetic(count=int(count), seed=int(seed))
            summary = payload["evaluation"]
            st.json(summary.__dict__)
            counts = pd.Series(summary.pair_counts, name="count")
            if not counts.empty:
                st.bar_chart(counts)


if __name__ == "__main__":
    main()
