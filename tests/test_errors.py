import pytest

from degensurvivor.errors import (
    ERROR_CODE_OFFSET,
    GameError,
    GameErrorKind,
    OracleError,
    OracleErrorKind,
    PrizeError,
    PrizeErrorKind,
    ProgramError,
    VaultError,
    VaultErrorKind,
)


def test_game_error_message():
    err = GameError(GameErrorKind.GAME_FULL)
    assert str(err) == "Game is full, maximum players reached"
    assert err.message == "Game is full, maximum players reached"
    assert err.kind is GameErrorKind.GAME_FULL


def test_first_kind_has_offset_code():
    assert GameError(GameErrorKind.GAME_NOT_STARTED).code == ERROR_CODE_OFFSET
    assert VaultError(VaultErrorKind.VAULT_PAUSED).code == ERROR_CODE_OFFSET


def test_codes_follow_declaration_order():
    codes = [OracleError(kind).code for kind in OracleErrorKind]
    assert codes == list(range(ERROR_CODE_OFFSET, ERROR_CODE_OFFSET + len(OracleErrorKind)))


def test_last_game_error_code():
    err = GameError(GameErrorKind.REGISTRATION_CLOSED)
    assert err.code == ERROR_CODE_OFFSET + len(GameErrorKind) - 1


def test_wrong_kind_is_rejected():
    with pytest.raises(TypeError):
        GameError(VaultErrorKind.VAULT_PAUSED)
    with pytest.raises(TypeError):
        PrizeError("Unauthorized")


def test_subclasses_are_catchable_as_program_error():
    err = PrizeError(PrizeErrorKind.ALREADY_CLAIMED)
    caught = None
    try:
        raise err
    except ProgramError as exc:
        caught = exc
    assert caught is err
    assert caught.kind is PrizeErrorKind.ALREADY_CLAIMED
    assert caught.message == "Prize has already been claimed by this player"
    assert caught.code == ERROR_CODE_OFFSET + 1


def test_program_error_accepts_any_kind():
    err = ProgramError(OracleErrorKind.ORACLE_PAUSED)
    assert err.message == "Oracle is currently paused by admin"


@pytest.mark.parametrize(
    "kind, message",
    [
        (VaultErrorKind.DEPOSIT_TOO_LARGE, "Deposite Amount is too large"),
        (OracleErrorKind.PRICE_STALE, "Price data is too old (stale), refresh required"),
        (PrizeErrorKind.NO_FEES_AVAILABLE, "No platform fees available to withdraw"),
    ],
)
def test_messages(kind, message):
    assert ProgramError(kind).message == message