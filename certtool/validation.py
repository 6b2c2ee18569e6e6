import logging
from typing import Any

from certtool.errors import SchemaError
from certtool.schemas import ExtractedInfo, FileDetail, GameInstanceData

logger = logging.getLogger(__name__)

RAW_EXCERPT_LENGTH = 500
TOP_LEVEL_KEYS = ("reportNumber", "certificationDate", "supplierRegistrationNumber")


def _excerpt(raw_text: str) -> str:
    return (raw_text or "")[:RAW_EXCERPT_LENGTH]


def _fail(message: str, raw_text: str):
    excerpt = _excerpt(raw_text)
    logger.error(f"{message} Raw: {excerpt}")
    raise SchemaError(message, raw_excerpt=excerpt)


def _optional_str(value):
    # Models sometimes answer numbers for ids ("reportNumber": 12345)
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def validate_extraction(raw: Any, raw_text: str) -> ExtractedInfo:
    """
    Checks the parsed model output against the extraction schema and builds
    an ExtractedInfo with every optional field set explicitly.

    Keys must be present even when their value is null; a missing key means
    the model did not follow the schema.
    """
    if not isinstance(raw, dict):
        _fail("Parsed JSON is not an object.", raw_text)

    missing = [key for key in TOP_LEVEL_KEYS if key not in raw]
    if missing:
        _fail(f"Parsed JSON does not match expected structure (missing {', '.join(missing)}).", raw_text)

    if not isinstance(raw.get("gameInstances"), list):
        _fail("Parsed JSON does not match expected structure (gameInstances is not an array).", raw_text)

    instances = []
    for index, instance in enumerate(raw["gameInstances"]):
        if not isinstance(instance, dict) or "gameName" not in instance or "gameCode" not in instance:
            _fail(f"Game instance {index} is invalid (missing gameName or gameCode).", raw_text)
        if not isinstance(instance.get("files"), list):
            _fail(f"Game instance {index} is invalid (files is not an array).", raw_text)

        files = []
        for file_entry in instance["files"]:
            if not isinstance(file_entry, dict) or not isinstance(file_entry.get("name"), str):
                _fail(f"File entry in game instance {index} is invalid (missing name).", raw_text)
            files.append(FileDetail(
                name=file_entry["name"],
                md5=_optional_str(file_entry.get("md5")),
                sha1=_optional_str(file_entry.get("sha1")),
            ))

        instances.append(GameInstanceData(
            game_name=_optional_str(instance["gameName"]),
            game_code=_optional_str(instance["gameCode"]),
            files=files,
        ))

    return ExtractedInfo(
        report_number=_optional_str(raw["reportNumber"]),
        certification_date=_optional_str(raw["certificationDate"]),
        supplier_registration_number=_optional_str(raw["supplierRegistrationNumber"]),
        game_instances=instances,
    )
