from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class FileStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class FileDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    md5: Optional[str] = None
    sha1: Optional[str] = None


class GameInstanceData(BaseModel):
    # The model answers in camelCase, we keep snake_case attributes
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    game_name: Optional[str] = Field(None, alias="gameName")
    # IMS game code only, never a generic provider game code
    game_code: Optional[str] = Field(None, alias="gameCode")
    files: List[FileDetail] = Field(default_factory=list)


class ExtractedInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    report_number: Optional[str] = Field(None, alias="reportNumber")
    certification_date: Optional[str] = Field(None, alias="certificationDate")
    supplier_registration_number: Optional[str] = Field(None, alias="supplierRegistrationNumber")
    game_instances: List[GameInstanceData] = Field(default_factory=list, alias="gameInstances")


class ProcessedFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    file_name: str = Field(alias="fileName")
    mime_type: str = Field("", alias="mimeType")
    status: FileStatus = FileStatus.QUEUED
    error_message: Optional[str] = Field(None, alias="errorMessage")
    report_number: Optional[str] = Field(None, alias="reportNumber")
    certification_date: Optional[str] = Field(None, alias="certificationDate")
    supplier_registration_number: Optional[str] = Field(None, alias="supplierRegistrationNumber")
    extracted_instances: List[GameInstanceData] = Field(default_factory=list, alias="extractedInstances")


class ProviderInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider: str
    portal_live_date: Optional[str] = Field(None, alias="portalLiveDate")
    ims_game_code: Optional[str] = Field(None, alias="imsGameCode")
