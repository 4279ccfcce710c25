"""
Subject/content templates for notifier messages.

Templates are Jinja2, compiled in async mode so that the lazily fetched
event details (`event.logs()`, `event.events()`, ...) can be called
directly from a template. Templates are compiled once when a notifier is
created; a syntax error there is a startup error.
"""

from __future__ import annotations

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError

from buildnotify.errors import ConfigError
from buildnotify.events.base import Event

DEFAULT_SUBJECT_TEMPLATE = "{{ event.object_type }} {{ event.namespace }}/{{ event.name }} {{ event.status }}"

DEFAULT_CONTENT_TEMPLATE = """<h3>{{ event.object_type }} {{ event.namespace }}/{{ event.name }}</h3>
<dl>
  <dt>Status</dt>
  <dd>{{ event.status }}</dd>
  <dt>Start Time</dt>
  <dd>{{ event.start_time or "" }}</dd>
  <dt>End Time</dt>
  <dd>{{ event.end_time or "" }}</dd>
  <dt>Duration</dt>
  <dd>{{ event.duration }}</dd>
  <dt>Input</dt>
  <dd>{{ event.input }}</dd>
  <dt>Output</dt>
  <dd>{{ event.output }}</dd>
  <dt>Node</dt>
  <dd>{{ event.node_name() }}</dd>
  <dt>Console</dt>{% set console = event.console_url() %}
  <dd><a href="{{ console }}">{{ console }}</a></dd>
  <dt>Logs</dt>
  <dd><pre>{{ event.logs() }}</pre></dd>
  <dt>Events</dt>
  <dd>
    <pre>
{% for line in event.events() %}{{ line }}
{% endfor %}    </pre>
  </dd>
</dl>"""

_environment = Environment(
    enable_async=True,
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def compile_template(source: str, name: str) -> Template:
    """Compile a template, raising ConfigError on syntax errors."""
    try:
        return _environment.from_string(source)
    except TemplateSyntaxError as exc:
        raise ConfigError(f"malformed {name} template (line {exc.lineno}): {exc.message}") from exc


async def render(template: Template, event: Event) -> str:
    return await template.render_async(event=event)
