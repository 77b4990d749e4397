"""Shared pytest fixtures for finledger tests."""

import shutil
from pathlib import Path

import pytest

from finledger.config import parse_config
from finledger.database.factories import create_sqlite_database
from finledger.database.seed import get_chart_of_accounts_seeds
from finledger.domain.account import AccountRegistry
from finledger.domain.journal import JournalEntryService
from finledger.sanitize.matcher import compile_rules
from finledger.sanitize.rules import GENERIC_RULES

MONZO = "Assets:Personal:Monzo"
WISE = "Assets:Personal:Wise"
VANGUARD = "Assets:Personal:Vanguard"

CONFIG_DATA = {
    "accounts": [
        {
            "id": MONZO,
            "group": "personal",
            "type": "asset",
            "provider": "monzo",
            "label": "Monzo Current",
            "inbox_folder": "monzo",
        },
        {
            "id": WISE,
            "group": "personal",
            "type": "asset",
            "provider": "wise",
            "inbox_folder": "wise",
        },
        {
            "id": VANGUARD,
            "group": "personal",
            "type": "asset",
            "provider": "vanguard",
            "subtype": "investment",
            "inbox_folder": "vanguard",
        },
    ],
}

CONFIG_TOML = """
[[accounts]]
id = "Assets:Personal:Monzo"
group = "personal"
type = "asset"
provider = "monzo"
inbox_folder = "monzo"

[[accounts]]
id = "Assets:Personal:Wise"
group = "personal"
type = "asset"
provider = "wise"
inbox_folder = "wise"

[[accounts]]
id = "Assets:Personal:Vanguard"
group = "personal"
type = "asset"
provider = "vanguard"
inbox_folder = "vanguard"
"""


@pytest.fixture
def config():
    """Configuration with one Monzo, one Wise and one Vanguard account."""
    return parse_config(CONFIG_DATA)


@pytest.fixture
def config_file(tmp_path):
    """Write the test configuration to data/fin.config.toml."""
    path = tmp_path / "data" / "fin.config.toml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CONFIG_TOML)
    return path


@pytest.fixture
def registry(config):
    return AccountRegistry(config)


@pytest.fixture
def rules():
    """Generic rules only."""
    return compile_rules(GENERIC_RULES)


@pytest.fixture
def temp_db(tmp_path, config):
    """Create a migrated temporary database for testing."""
    db_path = tmp_path / "fin.db"
    db = create_sqlite_database(database_path=str(db_path))
    # Store the path for tests that need it
    db.database_path = str(db_path)
    db.connect()
    db.initialize_schema(get_chart_of_accounts_seeds(config.accounts))

    yield db

    db.disconnect()


@pytest.fixture
def journal_service(temp_db):
    return JournalEntryService(temp_db)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def inbox(tmp_path, fixtures_dir):
    """Inbox populated with one statement per account folder."""
    inbox_dir = tmp_path / "imports" / "inbox"
    for folder, name in [
        ("monzo", "monzo_statement.csv"),
        ("wise", "wise_statement.csv"),
        ("vanguard", "vanguard_transactions.csv"),
    ]:
        (inbox_dir / folder).mkdir(parents=True)
        shutil.copy(fixtures_dir / name, inbox_dir / folder / name)
    return inbox_dir
