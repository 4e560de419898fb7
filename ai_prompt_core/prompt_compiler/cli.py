"""CLI tool for prompt discovery, compilation, evaluation, improvement and rendering."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from ai_prompt_core.evaluation import Evaluator, VariantEvaluation, summarize_evaluations
from ai_prompt_core.exceptions import PromptCoreError
from ai_prompt_core.improvement import Improver, ImprovementResult, ImprovementStatus
from ai_prompt_core.logging import setup_logging
from ai_prompt_core.settings import Settings, settings
from ai_prompt_core.synthesizer import OpenAISynthesizer, Synthesizer

from .cache import PromptCache
from .discover import DiscoveredPrompt, discover_prompts
from .generate import GenerateStatus, generate_all
from .hashing import hash_state
from .render import extract_variables, render, validate_options
from .types import DEFAULT_VARIANT, OperationFailure

_PREVIEW_INPUT_CHARS = 80
_PREVIEW_OUTPUT_LINES = 5


def _print_table(headers: list[str], rows: list[list[str]]) -> None:
    """Print an aligned text table."""
    if not rows:
        return
    widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers)]
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths, strict=True))
    separator = "  ".join("-" * w for w in widths)
    print(header_line)
    print(separator)
    for row in rows:
        print("  ".join(val.ljust(w) for val, w in zip(row, widths, strict=True)))


def _print_errors(title: str, errors: list[str]) -> None:
    if errors:
        print(f"\n{len(errors)} {title}:", file=sys.stderr)
        for err in errors:
            print(f"  {err}", file=sys.stderr)


def _print_failures(failures: tuple[OperationFailure, ...]) -> None:
    for failure in failures:
        target = f"{failure.prompt_id} [{failure.variant_name}]" if failure.variant_name else failure.prompt_id
        print(f"\n✗ {failure.operation} failed for \"{target}\":\n{failure.message}", file=sys.stderr)


def _run_settings(args: argparse.Namespace) -> Settings:
    """Settings with command-line overrides applied."""
    overrides: dict[str, Any] = {}
    for field in ("generated_file", "prompt_pattern", "model", "max_iterations", "prompt_ids"):
        value = getattr(args, field, None)
        if value is not None:
            overrides[field] = value
    for flag, field in (("force", "no_cache"), ("verbose", "verbose"), ("judge", "judge")):
        if getattr(args, flag, False):
            overrides[field] = True
    return settings.model_copy(update=overrides)


def _discover(root: Path, run_settings: Settings) -> list[DiscoveredPrompt]:
    prompts, errors = discover_prompts(root, run_settings.prompt_pattern)
    _print_errors("import error(s)", errors)
    return prompts


def _load_cache(root: Path, run_settings: Settings) -> PromptCache:
    path = run_settings.generated_file
    return PromptCache.load(path if path.is_absolute() else root / path)


def _make_synthesizer(run_settings: Settings) -> Synthesizer:
    return OpenAISynthesizer(run_settings.synthesizer_config())


def _variant_label(prompt_id: str, variant_name: str) -> str:
    return prompt_id if variant_name == DEFAULT_VARIANT else f"{prompt_id} [{variant_name}]"


def _format_evaluation(evaluation: VariantEvaluation, verbose: bool) -> str:
    icon = "✓" if evaluation.failed == 0 else "◐" if evaluation.passed > 0 else "✗"
    lines = [f'  {icon} "{evaluation.label}" - {evaluation.passed}/{evaluation.total} tests passed ({evaluation.success_rate:.0f}%)']
    for i, result in enumerate(evaluation.results if verbose else (), 1):
        lines.append(f"     {'✓' if result.passed else '✗'} {result.description or f'Test {i}'}")
        preview = result.input if len(result.input) <= _PREVIEW_INPUT_CHARS else result.input[:_PREVIEW_INPUT_CHARS] + "..."
        lines.append(f'       Input: "{preview}"')
        output_lines = result.output.split("\n")
        lines.append("       Output:")
        lines.extend(f"         {line}" for line in output_lines[:_PREVIEW_OUTPUT_LINES])
        if len(output_lines) > _PREVIEW_OUTPUT_LINES:
            lines.append(f"         ... ({len(output_lines) - _PREVIEW_OUTPUT_LINES} more lines)")
        if not result.passed and result.reason:
            lines.append(f"       Reason: {result.reason}")
    return "\n".join(lines)


def _format_improvement(result: ImprovementResult) -> str:
    label = _variant_label(result.prompt_id, result.variant_name)
    if result.status == ImprovementStatus.IMPROVED:
        if result.iterations == 0:
            line = f'  ✓ "{label}" - all tests already pass'
        else:
            line = f'  ✓ "{label}" - fixed {result.initial_failures} failing test(s) in {result.iterations} iteration(s)'
    elif result.status == ImprovementStatus.PLATEAU:
        line = f'  ◐ "{label}" - plateau after {result.iterations} iteration(s), {result.final_failures} still failing'
    else:
        line = f'  ✗ "{label}" - {result.final_failures} still failing after {result.iterations} iteration(s)'
    lines = [line]
    if result.source_hints:
        lines.append(f"    Source hints for {result.prompt_id}:")
        for hint in result.source_hints:
            lines.append(f"      {hint.action} {hint.step_type}: {hint.suggestion}")
            if hint.reason:
                lines.append(f"        Reason: {hint.reason}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_list(args: argparse.Namespace) -> int:
    """List discovered prompts with their cache status."""
    run_settings = _run_settings(args)
    prompts = _discover(args.root, run_settings)
    if not prompts:
        print("No prompts found.")
        return 0

    cache = _load_cache(args.root, run_settings)
    rows = []
    for found in prompts:
        entry = cache.get(found.id)
        if entry is None:
            status = "not generated"
        elif entry.hash == hash_state(found.prompt.state):
            status = "up to date"
        else:
            status = "stale"
        variables = extract_variables(entry.variants.values()) if entry else []
        rows.append([
            found.id,
            ", ".join(found.prompt.variant_names) or DEFAULT_VARIANT,
            ", ".join(found.prompt.optional_names) or "-",
            ", ".join(variables) or "-",
            str(len(found.prompt.tests)),
            status,
            str(found.file_path.relative_to(args.root.resolve())),
        ])

    print(f"{len(prompts)} prompt(s) found:\n")
    _print_table(["Id", "Variants", "Optional", "Variables", "Tests", "Status", "File"], rows)
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Compile discovered prompts into the cache artifact."""
    run_settings = _run_settings(args)
    prompts = _discover(args.root, run_settings)
    if not prompts:
        print("No prompts found.")
        return 0

    cache = _load_cache(args.root, run_settings)
    report = asyncio.run(
        generate_all([p.prompt for p in prompts], cache, _make_synthesizer(run_settings), no_cache=run_settings.no_cache)
    )
    for result in report.results:
        if result.status == GenerateStatus.CACHED:
            print(f'  ✓ "{result.prompt_id}" (cached)')
        elif result.status == GenerateStatus.COMPILED:
            suffix = f" {len(result.variant_names)} variant(s)" if len(result.variant_names) > 1 else ""
            print(f'  ✓ "{result.prompt_id}" generated{suffix}')
        else:
            print(f'  ✗ "{result.prompt_id}" failed')
    _print_failures(report.failures)

    print(f"\nWrote {cache.path} with {len(report.results) - len(report.failures)} prompt(s)")
    return 0 if report.ok else 1


def _cmd_eval(args: argparse.Namespace) -> int:
    """Run prompt tests against the compiled variants."""
    run_settings = _run_settings(args)
    prompts = [p.prompt for p in _discover(args.root, run_settings)]
    with_tests = [p for p in prompts if p.tests]
    if not with_tests:
        print("No prompts with tests found. Add tests with .test(input, assertion).")
        return 1

    cache = _load_cache(args.root, run_settings)
    evaluator = Evaluator(cache, _make_synthesizer(run_settings), judge=run_settings.judge)
    report = asyncio.run(evaluator.evaluate_all(with_tests))

    for evaluation in report.evaluations:
        print(_format_evaluation(evaluation, run_settings.verbose))
    for prompt_id in report.skipped:
        print(f'  - "{prompt_id}" skipped (not generated)')
    _print_failures(report.failures)

    summary = summarize_evaluations(report.evaluations)
    print("\n" + "─" * 60)
    print(f"Total: {summary.total_passed}/{summary.total_tests} tests passed ({summary.overall_success_rate:.0f}%)")
    if summary.best and summary.worst:
        print(f'Best:  "{summary.best.label}" ({summary.best.success_rate:.0f}%)')
        print(f'Worst: "{summary.worst.label}" ({summary.worst.success_rate:.0f}%)')
    return 0 if not report.failures and summary.total_passed == summary.total_tests else 1


def _cmd_improve(args: argparse.Namespace) -> int:
    """Iteratively rewrite compiled prompts until their tests pass."""
    run_settings = _run_settings(args)
    if run_settings.max_iterations < 1:
        print("Error: --max-iterations must be at least 1", file=sys.stderr)
        return 1
    prompt_ids = run_settings.prompt_id_filter()
    prompts = [p.prompt for p in _discover(args.root, run_settings)]
    selected = [p for p in prompts if p.tests and (not prompt_ids or p.id in prompt_ids)]
    if not selected:
        print("No prompts with tests found.")
        return 1

    cache = _load_cache(args.root, run_settings)
    improver = Improver(cache, _make_synthesizer(run_settings), judge=run_settings.judge, max_iterations=run_settings.max_iterations)
    report = asyncio.run(improver.improve_all(selected, prompt_ids=prompt_ids))

    for result in report.results:
        print(_format_improvement(result))
    for prompt_id in report.skipped:
        print(f'  - "{prompt_id}" skipped (not generated)')
    _print_failures(report.failures)

    improved = sum(1 for r in report.results if r.status == ImprovementStatus.IMPROVED)
    print(f"\n{improved}/{len(report.results)} variant(s) passing all tests. Updated {cache.path}")
    return 0 if improved == len(report.results) and not report.failures else 1


def _parse_assignments(pairs: list[str]) -> dict[str, str]:
    options: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{pair}'")
        options[key] = value
    return options


def _cmd_render(args: argparse.Namespace) -> int:
    """Render a compiled prompt with options."""
    run_settings = _run_settings(args)
    try:
        options: dict[str, str | bool] = {**_parse_assignments(args.set), **dict.fromkeys(args.enable, True)}
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    cache = _load_cache(args.root, run_settings)
    if args.prompt_id not in cache:
        print(f"Error: prompt '{args.prompt_id}' has not been generated", file=sys.stderr)
        return 1

    prompts = {p.id: p.prompt for p in _discover(args.root, run_settings)}
    prompt = prompts.get(args.prompt_id)
    if prompt is not None:
        validation = validate_options(prompt, cache, options, args.variant)
        for problem in validation.errors():
            print(f"Warning: {problem}", file=sys.stderr)
        for name in validation.missing_variables:
            print(f"Warning: variable '{name}' not set", file=sys.stderr)

    print(render(cache, args.prompt_id, args.variant, options))
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--root", type=Path, default=Path.cwd(), help="Project root for prompt discovery")
    parser.add_argument("--generated-file", dest="generated_file", type=Path, help="Cache artifact path (relative to root)")
    parser.add_argument("--pattern", dest="prompt_pattern", help="Glob for prompt definition files")


def _add_model_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--model", help="Model override")
    parser.add_argument("--verbose", action="store_true", help="Show test inputs, outputs and debug logging")
    parser.add_argument("--judge", action="store_true", help="Evaluate string assertions with the judge model")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for prompt compiler operations."""
    parser = argparse.ArgumentParser(prog="ai-prompt", description="Compile, evaluate and improve code-defined prompts")
    subparsers = parser.add_subparsers(dest="command")

    # list
    list_parser = subparsers.add_parser("list", help="List discovered prompts and their cache status")
    _add_common(list_parser)

    # generate
    generate_parser = subparsers.add_parser("generate", help="Compile prompts into the cache artifact")
    _add_common(generate_parser)
    generate_parser.add_argument("--force", action="store_true", help="Recompile even when the hash matches")
    generate_parser.add_argument("--model", help="Model override")
    generate_parser.add_argument("--verbose", action="store_true", help="Debug logging")

    # eval
    eval_parser = subparsers.add_parser("eval", help="Run prompt tests against compiled variants")
    _add_common(eval_parser)
    _add_model_options(eval_parser)

    # improve
    improve_parser = subparsers.add_parser("improve", help="Rewrite compiled prompts until their tests pass")
    _add_common(improve_parser)
    _add_model_options(improve_parser)
    improve_parser.add_argument("--max-iterations", dest="max_iterations", type=int, help="Iteration cap per variant")
    improve_parser.add_argument("--prompt-ids", dest="prompt_ids", help="Comma-separated prompt ids to improve")

    # render
    render_parser = subparsers.add_parser("render", help="Render a compiled prompt")
    _add_common(render_parser)
    render_parser.add_argument("prompt_id", help="Prompt id")
    render_parser.add_argument("--variant", default=DEFAULT_VARIANT, help="Variant name")
    render_parser.add_argument("--set", action="append", default=[], metavar="KEY=VALUE", help="Set a variable")
    render_parser.add_argument("--enable", action="append", default=[], metavar="NAME", help="Enable an optional block")

    args = parser.parse_args(argv)

    handlers = {"list": _cmd_list, "generate": _cmd_generate, "eval": _cmd_eval, "improve": _cmd_improve, "render": _cmd_render}
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    if getattr(args, "verbose", False) or settings.verbose:
        setup_logging(level="DEBUG")

    try:
        return handler(args)
    except PromptCoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


__all__ = ["main"]
