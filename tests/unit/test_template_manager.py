import pytest
import aiofiles.os

from hbs_render.error.exceptions import AccessDeniedError, TemplateReadError
from hbs_render.templates.manager import DEFAULT_CACHE_TTL, TemplateManager


@pytest.mark.asyncio
async def test_get_template_reuses_cached_instance(manager, read_counter):
    """Test unchanged templates are served from the cache without reading."""
    first = await manager.get_template("hello.hbs")
    second = await manager.get_template("hello.hbs")

    assert first is second
    assert read_counter == ["hello.hbs"]
    assert first({"name": "A"}) == "Hi A"


@pytest.mark.asyncio
async def test_get_template_recompiles_on_mtime_change(manager, views_dir, read_counter, write_template):
    """Test a changed modification time forces a re-read and recompile."""
    first = await manager.get_template("hello.hbs")
    write_template(views_dir / "hello.hbs", "Hello {{name}}!")

    second = await manager.get_template("hello.hbs")

    assert second is not first
    assert second({"name": "B"}) == "Hello B!"
    assert read_counter == ["hello.hbs", "hello.hbs"]
    assert manager.template_cache.entry("hello.hbs").artifact is second


@pytest.mark.asyncio
async def test_disabled_caching_rereads_every_time(manager, read_counter):
    """Test disabling caching recompiles on every lookup."""
    manager.set_caching(False)

    first = await manager.get_template("hello.hbs")
    second = await manager.get_template("hello.hbs")

    assert first is not second
    assert read_counter == ["hello.hbs", "hello.hbs"]


@pytest.mark.asyncio
async def test_reenabled_caching_uses_latest_entry(manager, read_counter):
    """Test entries written while caching was off are reused once it is back on."""
    manager.set_caching(False)
    compiled = await manager.get_template("hello.hbs")
    manager.set_caching(True)

    assert await manager.get_template("hello.hbs") is compiled
    assert read_counter == ["hello.hbs"]


@pytest.mark.asyncio
async def test_clear_cache_forces_fresh_read(manager, read_counter):
    """Test clearing the cache triggers a new read and compile."""
    await manager.initialize()
    first = await manager.get_template("hello.hbs")
    assert len(manager.partial_cache) == 2

    manager.clear_cache()

    assert len(manager.template_cache) == 0
    assert len(manager.partial_cache) == 0
    second = await manager.get_template("hello.hbs")
    assert second is not first
    assert read_counter == ["hello.hbs", "hello.hbs"]


@pytest.mark.asyncio
async def test_cache_ttl_is_stored_but_not_enforced(manager, read_counter):
    """Test the cache TTL never expires an entry."""
    assert manager.cache_ttl == DEFAULT_CACHE_TTL
    manager.set_cache_ttl(0)

    first = await manager.get_template("hello.hbs")
    second = await manager.get_template("hello.hbs")

    assert manager.cache_ttl == 0
    assert first is second
    assert read_counter == ["hello.hbs"]


@pytest.mark.asyncio
async def test_traversal_is_denied_without_file_access(manager, monkeypatch, read_counter):
    """Test paths escaping the views root are rejected before any I/O."""
    async def fail_stat(*args, **kwargs):
        raise AssertionError("stat must not be called")

    monkeypatch.setattr(aiofiles.os, "stat", fail_stat)

    with pytest.raises(AccessDeniedError) as exc_info:
        await manager.get_template("../secret.hbs")

    assert exc_info.value.template_name == "../secret.hbs"
    assert read_counter == []


@pytest.mark.asyncio
async def test_missing_template_raises_read_error(manager):
    """Test a missing file is reported with its logical path."""
    with pytest.raises(TemplateReadError) as exc_info:
        await manager.get_template("missing.hbs")

    assert exc_info.value.template_name == "missing.hbs"
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)


@pytest.mark.asyncio
async def test_render_with_layout(manager):
    """Test the layout receives the rendered content as body."""
    result = await manager.render("hello.hbs", {"name": "A"}, "main.hbs")
    assert result == "[Hi A]"


@pytest.mark.asyncio
async def test_render_without_layout(manager):
    """Test rendering without a layout returns the content directly."""
    assert await manager.render("hello.hbs", {"name": "A"}) == "Hi A"


@pytest.mark.asyncio
async def test_render_layout_sees_context(manager, views_dir, write_template):
    """Test the layout context extends the render context."""
    write_template(views_dir / "layouts" / "titled.hbs", "{{title}}: {{body}}")

    result = await manager.render("hello.hbs", {"name": "A", "title": "Greeting"}, "titled.hbs")

    assert result == "Greeting: Hi A"


@pytest.mark.asyncio
async def test_render_html_layout_with_triple_stash(manager):
    """Test unescaped body output through a triple-stash layout."""
    await manager.initialize()

    result = await manager.render("page.hbs", {"title": "T", "message": "m"}, "html.hbs")

    assert result == "<html><h1>T</h1><p>m</p></html>"


@pytest.mark.asyncio
async def test_layouts_are_cached_separately(manager):
    """Test layouts are cached under the layouts directory key."""
    await manager.render("hello.hbs", {"name": "A"}, "main.hbs")

    assert "hello.hbs" in manager.template_cache
    assert "layouts/main.hbs" in manager.template_cache


@pytest.mark.asyncio
async def test_layout_traversal_is_denied(manager):
    """Test layouts cannot escape the layouts root."""
    with pytest.raises(AccessDeniedError):
        await manager.render("hello.hbs", {"name": "A"}, "../../outside.hbs")


@pytest.mark.asyncio
async def test_render_failure_is_reported_and_reraised(manager):
    """Test render errors reach observers and propagate unchanged."""
    reported = []
    manager.error_reporter.add_observer(lambda error, operation, details: reported.append((error, operation, details)))

    with pytest.raises(TemplateReadError) as exc_info:
        await manager.render("missing.hbs", {})

    error, operation, details = reported[0]
    assert error is exc_info.value
    assert operation == "render"
    assert details["template"] == "missing.hbs"
    assert details["duration_ms"] >= 0


@pytest.mark.asyncio
async def test_render_logs_duration(manager, caplog):
    """Test successful renders are timed at debug level."""
    caplog.set_level("DEBUG", logger="hbs_render")

    await manager.render("hello.hbs", {"name": "A"}, "main.hbs")

    messages = [record.getMessage() for record in caplog.records]
    assert any("Template hello.hbs with layout main.hbs rendered in" in message for message in messages)


@pytest.mark.asyncio
async def test_helper_registration_applies_after_recompile(manager, views_dir, write_template):
    """Test cached templates keep the helpers they were compiled with."""
    write_template(views_dir / "shout.hbs", "{{shout name}}")
    manager.register_helper("shout", lambda this, value: value.upper())

    assert await manager.render("shout.hbs", {"name": "ada"}) == "ADA"

    manager.register_helper("shout", lambda this, value: value + "!")
    assert await manager.render("shout.hbs", {"name": "ada"}) == "ADA"

    manager.clear_cache()
    assert await manager.render("shout.hbs", {"name": "ada"}) == "ada!"


@pytest.mark.asyncio
async def test_initialize_installs_builtin_helpers(manager):
    """Test initialization registers partials and the built-in helpers."""
    names = await manager.initialize()

    assert sorted(names) == ["footer", "header"]
    assert {"eq", "formatDate"} <= set(manager.engine.helpers)


@pytest.mark.asyncio
async def test_initialize_missing_partials_root_raises(tmp_path):
    """Test a missing partials root fails initialization."""
    manager = TemplateManager({"VIEWS_DIR": str(tmp_path), "PARTIALS_DIR": "nope"})
    reported = []
    manager.error_reporter.add_observer(lambda error, operation, details: reported.append(operation))

    with pytest.raises(TemplateReadError):
        await manager.initialize()

    assert reported == ["initialize"]


def test_managers_are_independent(views_dir, tmp_path):
    """Test separate managers hold separate configuration and helpers."""
    first = TemplateManager({"VIEWS_DIR": str(views_dir)})
    second = TemplateManager({"VIEWS_DIR": str(tmp_path)})
    first.register_helper("only_first", lambda this: "x")

    assert first.config.views_dir != second.config.views_dir
    assert "only_first" not in second.engine.helpers
    assert first.cache_info()["caching_enabled"] is True
