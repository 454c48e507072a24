import logging
from dataclasses import asdict, is_dataclass
from pathlib import Path

import orjson
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from mojirec.data.generator import MojibakeSample, generate_mojibake_corpus
from mojirec.engine import RecoveryEngine, RecoveryOptions, default_engine
from mojirec.errors import CatalogConfigError, RecoveryInputError
from mojirec.eval.harness import evaluate_corpus, evaluate_synthetic
from mojirec.eval.report import append_csv, append_jsonl, summary_to_row
from mojirec.eval.summarize import summarize_log
from mojirec.export import results_to_arrow, results_to_jsonl

app = typer.Typer(help="Recover readable text from mojibake.")
dataset_app = typer.Typer(help="Dataset helpers (synthetic labelled mojibake).")
eval_app = typer.Typer(help="Evaluation harness for the credibility scorer.")
console = Console()
_state: dict[str, RecoveryEngine] = {}

app.add_typer(dataset_app, name="dataset")
app.add_typer(eval_app, name="eval")


def _engine() -> RecoveryEngine:
    return _state.get("engine") or default_engine()


def _serialize(obj: object) -> object:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    raise TypeError(f"Cannot serialise {type(obj).__name__}")


def _dump(payload: object) -> str:
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2, default=_serialize).decode()


def _print_json(payload: object) -> None:
    # Recovered text may contain [tags] that Rich would otherwise render as markup.
    console.print(_dump(payload), markup=False, highlight=False, soft_wrap=True)


def _read_text(path: Path) -> str:
    if not path.is_file():
        raise typer.BadParameter(f"Input file not found: {path}")
    return path.read_text(encoding="utf-8")


@app.callback()
def main(
    catalog: Path | None = typer.Option(
        None, "--catalog", help="Alternate catalog document (YAML or JSON)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine decisions."),
) -> None:
    """Search encoding-misinterpretation hypotheses and rank the recoveries."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    _state.pop("engine", None)
    if catalog:
        if not catalog.is_file():
            raise typer.BadParameter(f"Catalog file not found: {catalog}")
        try:
            _state["engine"] = RecoveryEngine.from_paths(catalog_path=catalog)
        except CatalogConfigError as exc:
            raise typer.BadParameter(str(exc)) from exc


@app.command()
def recover(
    text: str = typer.Argument(..., help="Garbled text to recover."),
    strategy: str = typer.Option("balanced", "--strategy", "-s", help="fast | balanced | aggressive."),
    category: str | None = typer.Option(None, "--category", help="Restrict to one pair category."),
    max_results: int = typer.Option(10, "--max-results", "-n", help="Maximum results to return."),
    min_credibility: float = typer.Option(30.0, "--min-credibility", help="Drop results below this score."),
    no_recommended: bool = typer.Option(
        False, "--no-recommended", help="Try the raw catalog instead of detector-narrowed pairs."
    ),
    workers: int = typer.Option(1, "--workers", "-w", help="Threads for the trial loop."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Optional path to write JSON."),
) -> None:
    """Rank every credible recovery of TEXT."""
    options = RecoveryOptions(
        max_results=max_results,
        min_credibility=min_credibility,
        strategy=strategy,
        category=category,
        use_recommended=not no_recommended,
        workers=workers,
    )
    try:
        results = _engine().recover(text, options)
    except RecoveryInputError as exc:
        raise typer.BadParameter(str(exc)) from exc

    payload = [r.to_dict() for r in results]
    if output:
        output.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        console.print(f"[bold green]Wrote {len(results)} results[/] to {output}")
        return
    if not results:
        console.print("[yellow]No credible recovery found.[/]")
        return
    table = Table(title=f"Recoveries ({options.strategy})")
    table.add_column("#", justify="right")
    table.add_column("source -> target")
    table.add_column("credibility", justify="right")
    table.add_column("method")
    table.add_column("text")
    for rank, r in enumerate(results, start=1):
        table.add_row(
            str(rank),
            f"{r.source_encoding} -> {r.target_encoding}",
            f"{r.credibility:.2f}",
            r.method,
            Text(r.recovered_text),
        )
    console.print(table)


@app.command()
def quick(text: str = typer.Argument(..., help="Garbled text to recover.")) -> None:
    """Print the single best fast-strategy recovery."""
    try:
        result = _engine().quick_recover(text)
    except RecoveryInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if result is None:
        console.print("[yellow]No credible recovery found.[/]")
        raise typer.Exit(code=1)
    _print_json(result.to_dict())


@app.command()
def batch(
    input: Path = typer.Argument(..., help="UTF-8 file with one garbled text per line."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write results as .jsonl, .jsonl.gz or .arrow."
    ),
    strategy: str = typer.Option("balanced", "--strategy", "-s", help="fast | balanced | aggressive."),
    max_results: int = typer.Option(3, "--max-results", "-n", help="Candidates kept per line."),
) -> None:
    """Recover every line of INPUT independently."""
    lines = [line for line in _read_text(input).splitlines() if line.strip()]
    items = _engine().batch_recover(lines, {"strategy": strategy, "max_results": max_results})
    succeeded = sum(1 for item in items if item.success)
    console.print(f"[bold green]Recovered[/] {succeeded}/{len(items)} lines from {input}")

    if output is None:
        _print_json([item.to_dict() for item in items])
    elif output.suffix.lower() == ".arrow":
        results_to_arrow(items, output)
        console.print(f"[bold green]Wrote Arrow table[/] to {output}")
    else:
        results_to_jsonl(items, output, gzip_output=output.suffix.lower() == ".gz")
        console.print(f"[bold green]Wrote JSONL[/] to {output}")


@app.command()
def score(text: str = typer.Argument(..., help="Text to score.")) -> None:
    """Show the credibility report for TEXT as-is."""
    _print_json(_engine().score_text(text).to_dict())


@app.command()
def detect(text: str = typer.Argument(..., help="Text to inspect.")) -> None:
    """List the pair categories the detector suggests for TEXT."""
    _print_json(_engine().detect_categories(text))


@app.command()
def pairs(
    text: str = typer.Argument(..., help="Text to plan a search for."),
    strategy: str = typer.Option("balanced", "--strategy", "-s", help="fast | balanced | aggressive."),
) -> None:
    """List the encoding pairs a recovery of TEXT would try, in order."""
    try:
        planned = _engine().recommended_pairs(text, {"strategy": strategy})
    except RecoveryInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _print_json([p.to_dict() for p in planned])


@app.command()
def encodings(
    category: str | None = typer.Option(None, "--category", help="Only this category."),
) -> None:
    """List supported encodings."""
    _print_json(_engine().list_supported_encodings(category))


@app.command()
def strategies() -> None:
    """List strategy names."""
    _print_json(_engine().list_strategies())


@dataset_app.command("synthetic")
def dataset_synthetic(
    output: Path = typer.Argument(..., help="Path to write the labelled corpus (.jsonl)."),
    count: int = typer.Option(16, "--count", "-c", help="Number of samples to emit."),
    seed: int = typer.Option(1234, "--seed", help="Seed for reproducible sampling."),
) -> None:
    """Generate labelled mojibake samples from clean sentences."""
    samples = generate_mojibake_corpus(count=count, seed=seed)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(b"".join(orjson.dumps(s.to_dict()) + b"\n" for s in samples))
    console.print(f"[bold green]Wrote[/] {len(samples)} samples to {output}")


def _load_samples(path: Path) -> list[MojibakeSample]:
    samples: list[MojibakeSample] = []
    for line in _read_text(path).splitlines():
        if not line.strip():
            continue
        entry = orjson.loads(line)
        try:
            samples.append(
                MojibakeSample(
                    garbled=entry["garbled"],
                    expected=entry["expected"],
                    source_encoding=entry.get("source_encoding", ""),
                    target_encoding=entry.get("target_encoding", ""),
                    category=entry.get("category", ""),
                )
            )
        except KeyError as exc:
            raise typer.BadParameter(f"Sample in {path} is missing {exc.args[0]}") from exc
    return samples


@eval_app.command("corpus")
def eval_corpus(
    input: Path | None = typer.Option(
        None,
        "--input",
        "-i",
        help="Labelled corpus (.jsonl). If omitted, a synthetic corpus is generated.",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Optional path to write evaluation JSON."
    ),
    log_csv: Path | None = typer.Option(
        None, "--log-csv", help="Append summary as a CSV row for trend tracking."
    ),
    log_jsonl: Path | None = typer.Option(
        None, "--log-jsonl", help="Append full payload as JSONL for trend tracking."
    ),
    tag: str | None = typer.Option(None, "--tag", help="Optional tag to mark this run."),
    strategy: str = typer.Option("balanced", "--strategy", "-s", help="Strategy to evaluate."),
    count: int = typer.Option(16, "--count", "-c", help="Samples to generate for synthetic eval."),
    seed: int = typer.Option(1234, "--seed", help="Seed for synthetic generation."),
) -> None:
    """Measure how often the top recovery is the original text."""
    options = {"strategy": strategy}
    if input:
        summary = evaluate_corpus(_load_samples(input), options, engine=_engine())
        payload: dict[str, object] = {"source": str(input), "evaluation": summary}
    else:
        payload = evaluate_synthetic(count=count, seed=seed, options=options, engine=_engine())
    payload["tag"] = tag

    evaluation = payload["evaluation"]
    if log_csv:
        row = summary_to_row(evaluation, source=str(input or "synthetic"), tag=tag)  # type: ignore[arg-type]
        append_csv(log_csv, row)
        console.print(f"[bold green]Appended CSV log[/] to {log_csv}")
    if log_jsonl:
        append_jsonl(log_jsonl, payload)
        console.print(f"[bold green]Appended JSONL log[/] to {log_jsonl}")

    if output:
        output.write_bytes(orjson.dumps(payload, default=_serialize))
        console.print(f"[bold green]Wrote evaluation report[/] to {output}")
    else:
        _print_json(payload)


@eval_app.command("summarize")
def eval_summarize(
    log: Path = typer.Argument(..., help="CSV or JSONL log file produced by eval."),
) -> None:
    """Summarize log(s) produced by eval logging."""
    if not log.is_file():
        raise typer.BadParameter(f"Log file not found: {log}")
    _print_json(summarize_log(log))


if __name__ == "__main__":
    app()
