import pytest
from sqlalchemy import text

from shift_roster.core.config import Settings
from shift_roster.db.session import get_db_session


@pytest.mark.anyio("asyncio")
async def test_get_db_session_uses_configured_engine(swap_db_engine: None) -> None:
    sessions = get_db_session()
    session = await sessions.__anext__()
    try:
        result = await session.execute(text("SELECT count(*) FROM officerprofile"))
        assert result.scalar_one() == 0
    finally:
        await sessions.aclose()


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROSTER_DEFAULT_MINIMUM_SUPERVISORS", "2")
    monkeypatch.setenv("ROSTER_UNKNOWN_OFFICER_NAME", "Unassigned")

    settings = Settings()

    assert settings.default_minimum_supervisors == 2
    assert settings.unknown_officer_name == "Unassigned"
    assert "Riding Partner (PPO)" in settings.predefined_positions
