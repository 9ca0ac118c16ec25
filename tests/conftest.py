"""Pytest configuration and fixtures."""
import logging
import os
from pathlib import Path

import pytest

import hbs_render
from hbs_render.templates.manager import TemplateManager


def _write_template(path: Path, content: str, bump_seconds: int = 0) -> Path:
    """Write a template file, optionally pushing its mtime forward."""
    path.parent.mkdir(parents=True, exist_ok=True)
    previous = path.stat() if path.exists() else None
    path.write_text(content, encoding="utf-8")
    if previous is not None or bump_seconds:
        base = previous.st_mtime_ns if previous is not None else path.stat().st_mtime_ns
        new_mtime = base + max(bump_seconds, 1) * 1_000_000_000
        os.utime(path, ns=(new_mtime, new_mtime))
    return path


@pytest.fixture
def write_template():
    """Expose the template writer to tests."""
    return _write_template


@pytest.fixture
def views_dir(tmp_path):
    """Create a views tree with partials and layouts."""
    views = tmp_path / "views"
    _write_template(views / "hello.hbs", "Hi {{name}}")
    _write_template(views / "page.hbs", "{{> header}}<p>{{message}}</p>")
    _write_template(views / "layouts" / "main.hbs", "[{{body}}]")
    _write_template(views / "layouts" / "html.hbs", "<html>{{{body}}}</html>")
    _write_template(views / "partials" / "header.hbs", "<h1>{{title}}</h1>")
    _write_template(views / "partials" / "nested" / "deep" / "footer.hbs", "<footer>{{year}}</footer>")
    (views / "partials" / "notes.txt").write_text("not a partial", encoding="utf-8")
    return views


@pytest.fixture
def manager(views_dir):
    """Create a template manager rooted at the views fixture."""
    return TemplateManager({
        "VIEWS_DIR": str(views_dir),
        "PARTIALS_DIR": "partials",
        "LAYOUTS_DIR": "layouts",
        "LOG_LEVEL": "debug",
    })


@pytest.fixture
def read_counter(manager, monkeypatch):
    """Record every template content read performed by the manager."""
    calls = []
    original_read = manager._read

    async def counting_read(full_path, template_name):
        calls.append(template_name)
        return await original_read(full_path, template_name)

    monkeypatch.setattr(manager, "_read", counting_read)
    return calls


@pytest.fixture
def default_manager(monkeypatch):
    """Give the module-level facade a fresh default manager."""
    monkeypatch.setattr(hbs_render, "_default_manager", None)
    yield hbs_render.get_manager()
    monkeypatch.setattr(hbs_render, "_default_manager", None)


@pytest.fixture
def root_logging():
    """Restore root logger handlers and level replaced during a test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)
