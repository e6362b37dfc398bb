from __future__ import annotations

import argparse
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from website_pipeline.core import (
    PipelineDefinitionError,
    atomic_write_json,
    bind,
    configure_logging,
    get_logger,
    load_props_file,
    load_settings,
    write_sha256_sum_txt,
)
from website_pipeline.render import render_template, template_fingerprint
from website_pipeline.stack import WebsitePipelineStack, build_website_pipeline

console = Console()

TEMPLATE_FILENAME = "template.json"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="website-pipeline")
    sub = p.add_subparsers(dest="cmd", required=True)

    commands: dict[str, str] = {
        "synth": "Render the pipeline definition to a deployment template",
        "describe": "Print stages, actions and per-role permissions",
    }
    for cmd, help_text in commands.items():
        sp = sub.add_parser(cmd, help=help_text)
        sp.add_argument(
            "--props",
            required=True,
            help="JSON file with stack props. oauth_token may come from WEBSITE_PIPELINE_OAUTH_TOKEN instead.",
        )
        if cmd == "synth":
            sp.add_argument(
                "--out",
                default=None,
                help="Output directory (default: WEBSITE_PIPELINE_OUT_DIR or ./cdk.out)",
            )
    return p


def _describe(stack: WebsitePipelineStack) -> None:
    stages = Table(title=f"Pipeline {stack.pipeline.name}", show_header=True)
    stages.add_column("stage")
    stages.add_column("action")
    stages.add_column("kind")
    stages.add_column("input")
    stages.add_column("output")
    for stage in stack.pipeline.stages:
        for a in stage.ordered_actions():
            stages.add_row(
                stage.name.value,
                a.name,
                a.kind.value,
                a.input_artifact or "-",
                a.output_artifact or "-",
            )
    console.print(stages)

    perms = Table(title="Permissions", show_header=True)
    perms.add_column("role")
    perms.add_column("trusts")
    perms.add_column("statement")
    perms.add_column("actions")
    perms.add_column("resources")
    for role in stack.roles:
        for s in role.policy.statements:
            perms.add_row(
                role.name,
                role.assumed_by,
                s.sid,
                "\n".join(s.actions),
                "\n".join(s.resources),
            )
    console.print(perms)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    s = load_settings()
    configure_logging(level=s.log_level, fmt=s.log_format)
    log = get_logger("website_pipeline")
    bind(command=str(args.cmd))

    try:
        stack = build_website_pipeline(
            load_props_file(Path(args.props), settings=s), logger=log
        )
    except PipelineDefinitionError as e:
        console.print(Panel.fit(Text(str(e)), title=type(e).__name__, style="red"))
        return 1

    if args.cmd == "describe":
        _describe(stack)
        return 0

    template = render_template(stack)
    digest = template_fingerprint(template)

    out_dir = Path(args.out) if args.out else Path(s.out_dir)
    template_path = out_dir / TEMPLATE_FILENAME
    atomic_write_json(template_path, template)
    write_sha256_sum_txt(out_dir / "template.sha256", TEMPLATE_FILENAME, digest)
    log.info("Template written", path=str(template_path), sha256=digest)

    tbl = Table(title="Result", show_header=True, box=None)
    tbl.add_row("pipeline", stack.pipeline.name)
    tbl.add_row("stages", " -> ".join(stack.pipeline.stage_names))
    tbl.add_row("template", str(template_path))
    tbl.add_row("sha256", digest)
    console.print(tbl)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
