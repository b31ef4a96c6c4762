from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from dbcheck.config import ProbeConfig
from dbcheck.core.models import LambdaIntegrationReport, SchemaCollation

TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"


def _load_static(filename: str) -> str:
    """Reads a static file's content from the static directory."""
    return (STATIC_DIR / filename).read_text(encoding="utf-8")


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,
    )


def render_html(template_name: str, data: dict) -> str:
    """
    Renders a self-contained HTML page. The stylesheet is inlined so the
    report can be saved or mailed without broken asset links.
    """
    template = _environment().get_template(template_name)
    return template.render(**data, inline_css=_load_static("report.css"))


def render_checks_report(report: LambdaIntegrationReport, config: ProbeConfig) -> str:
    schemas = []
    for name in sorted(report.routines):
        routines = report.routines[name]
        schemas.append({
            "name": name,
            "issues": report.incorrect_count(name),
            "total": len(routines),
            "routines": routines,
        })
    return render_html("checks.html.j2", {
        "invoker": report.invoker,
        "role_arn": report.role_arn,
        "schemas": schemas,
        "expected_collation": config.expected_collation,
        "expected_character_set": config.expected_character_set,
    })


def render_unicode_report(schemas: list[SchemaCollation], config: ProbeConfig) -> str:
    return render_html("unicode.html.j2", {
        "schemas": schemas,
        "expected_collation": config.expected_collation,
        "expected_character_set": config.expected_character_set,
    })
