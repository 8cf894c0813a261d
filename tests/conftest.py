import logging
import pytest
import structlog

import sitewalk.config.loader as config_loader


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path_factory, monkeypatch):
    # keep a developer's ~/.config/sitewalk/config.toml out of the tests.
    user_dir = tmp_path_factory.mktemp("user_config")
    monkeypatch.setattr(config_loader, "USER_CONFIG_DIR", user_dir)
    monkeypatch.setattr(config_loader, "USER_CONFIG_FILE", user_dir / "config.toml")
    return user_dir / "config.toml"


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    # cli runs attach a handler bound to the runner's stderr; drop it between tests.
    structlog.reset_defaults()
    logging.getLogger("sitewalk").handlers.clear()
    logging.getLogger("sitewalk").setLevel(logging.NOTSET)
    logging.getLogger("sitewalk").propagate = True


def create_project_structure(base_path, files_to_create: dict):
    """
    Creates a directory structure with files.
    files_to_create = {"dir/file.txt": "content", "empty_dir/": None}
    """
    base_path.mkdir(parents=True, exist_ok=True)
    for rel_path, content in files_to_create.items():
        target = base_path / rel_path
        if rel_path.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content if content is not None else f"content of {rel_path}")
    return base_path


@pytest.fixture
def make_tree():
    return create_project_structure
