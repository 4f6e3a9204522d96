from pathlib import Path


def test_latest_revision_file_exists():
    p = Path("alembic/versions/20261019_0001_library_plans.py")
    assert p.exists()


def test_revision_creates_catalog_table():
    text = Path("alembic/versions/20261019_0001_library_plans.py").read_text(encoding="utf-8")
    assert '"library_plans"' in text
    assert "down_revision = None" in text
