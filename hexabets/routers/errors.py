from fastapi import HTTPException, status

from hexabets.errors import HexaBetsError, InvalidBet, InvalidParameters, RaceViolation, StaleBoard

_STATUS_CODES = {
    InvalidBet: status.HTTP_400_BAD_REQUEST,
    InvalidParameters: status.HTTP_400_BAD_REQUEST,
    StaleBoard: status.HTTP_409_CONFLICT,
    RaceViolation: status.HTTP_409_CONFLICT,
}


def to_http_exception(error: HexaBetsError) -> HTTPException:
    status_code = _STATUS_CODES.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=str(error))
