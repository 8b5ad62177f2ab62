"""
Request and response shapes for the typed endpoint wrappers.

Each response type builds itself from the decoded JSON object with
``from_dict``; missing fields keep their defaults so an empty body decodes
to an empty answer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any
from urllib.parse import quote, urlencode

TIME_LAYOUTS = ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M:%S%z")


def parse_time(value: Any) -> datetime | None:
    """Parse a timestamp in one of the layouts the API uses.

    Values without an offset are taken as UTC.

    Raises:
        ValueError: If the value is not a string in a known layout.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"invalid time format: {value!r}")
    for layout in TIME_LAYOUTS:
        try:
            parsed = datetime.strptime(value, layout)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    raise ValueError(f"parse time: undefined layout: {value}")


def _seconds(ttl: timedelta) -> int:
    return int(ttl.total_seconds())


def _millis(value: Any) -> timedelta:
    return timedelta(milliseconds=int(value or 0))


@dataclass
class AccessTokenRequest:
    """Parameters for issuing an SDK access token."""

    user_id: str
    level_name: str
    ttl: timedelta = timedelta(minutes=10)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ttlInSecs": _seconds(self.ttl),
            "userId": self.user_id,
            "levelName": self.level_name,
        }


@dataclass
class AccessToken:
    """SDK access token."""

    token: str = ""
    user_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccessToken:
        return cls(token=data.get("token") or "", user_id=data.get("userId") or "")


@dataclass
class WebSDKLinkRequest:
    """Parameters for an external WebSDK link."""

    level_name: str
    user_id: str
    ttl: timedelta = timedelta(minutes=30)
    lang: str = ""

    def uri(self) -> str:
        """Path and query string for this request.

        Query keys are sorted so the signed URI is stable.
        """
        path = f"/resources/sdkIntegrations/levels/{quote(self.level_name, safe='')}/websdkLink"
        query = urlencode(
            sorted(
                {
                    "externalUserId": self.user_id,
                    "ttlInSecs": str(_seconds(self.ttl)),
                    "lang": self.lang,
                }.items()
            )
        )
        return f"{path}?{query}"


@dataclass
class WebSDKLink:
    """External WebSDK link."""

    url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WebSDKLink:
        return cls(url=data.get("url") or "")


@dataclass
class ReviewResult:
    """Outcome of a completed review."""

    moderation_comment: str = ""
    client_comment: str = ""
    review_answer: str = ""
    reject_labels: list[str] = field(default_factory=list)
    review_reject_type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewResult:
        return cls(
            moderation_comment=data.get("moderationComment") or "",
            client_comment=data.get("clientComment") or "",
            review_answer=data.get("reviewAnswer") or "",
            reject_labels=list(data.get("rejectLabels") or []),
            review_reject_type=data.get("reviewRejectType") or "",
        )


@dataclass
class ReviewStatus:
    """Applicant review status."""

    review_id: str = ""
    attempt_id: str = ""
    attempt_cnt: int = 0
    elapsed_since_pending: timedelta = timedelta()
    elapsed_since_queued: timedelta = timedelta()
    reprocessing: bool = False
    create_date: datetime | None = None
    review_date: datetime | None = None
    review_result: ReviewResult = field(default_factory=ReviewResult)
    review_status: str = ""
    priority: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewStatus:
        return cls(
            review_id=data.get("reviewId") or "",
            attempt_id=data.get("attemptId") or "",
            attempt_cnt=int(data.get("attemptCnt") or 0),
            elapsed_since_pending=_millis(data.get("elapsedSincePendingMs")),
            elapsed_since_queued=_millis(data.get("elapsedSinceQueuedMs")),
            reprocessing=bool(data.get("reprocessing", False)),
            create_date=parse_time(data.get("createDate")),
            review_date=parse_time(data.get("reviewDate")),
            review_result=ReviewResult.from_dict(data.get("reviewResult") or {}),
            review_status=data.get("reviewStatus") or "",
            priority=int(data.get("priority") or 0),
        )


@dataclass
class FixedInfo:
    """Applicant data that the applicant cannot change."""

    first_name: str = ""
    last_name: str = ""
    dob: date | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FixedInfo:
        dob = parse_time(data.get("dob"))
        return cls(
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            dob=dob.date() if dob else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "dob": self.dob.strftime("%Y-%m-%d") if self.dob else None,
        }


@dataclass
class IDDoc:
    """Identity document extracted during verification."""

    id_doc_type: str = ""
    country: str = ""
    first_name: str = ""
    first_name_en: str = ""
    last_name: str = ""
    last_name_en: str = ""
    valid_until: datetime | None = None
    number: str = ""
    dob: datetime | None = None
    mrz_line1: str = ""
    mrz_line2: str = ""
    mrz_line3: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IDDoc:
        return cls(
            id_doc_type=data.get("idDocType") or "",
            country=data.get("country") or "",
            first_name=data.get("firstName") or "",
            first_name_en=data.get("firstNameEn") or "",
            last_name=data.get("lastName") or "",
            last_name_en=data.get("lastNameEn") or "",
            valid_until=parse_time(data.get("validUntil")),
            number=data.get("number") or "",
            dob=parse_time(data.get("dob")),
            mrz_line1=data.get("mrzLine1") or "",
            mrz_line2=data.get("mrzLine2") or "",
            mrz_line3=data.get("mrzLine3") or "",
        )


@dataclass
class Info:
    """Applicant data as recognized from documents."""

    first_name: str = ""
    first_name_en: str = ""
    last_name: str = ""
    last_name_en: str = ""
    dob: datetime | None = None
    country: str = ""
    id_docs: list[IDDoc] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Info:
        return cls(
            first_name=data.get("firstName") or "",
            first_name_en=data.get("firstNameEn") or "",
            last_name=data.get("lastName") or "",
            last_name_en=data.get("lastNameEn") or "",
            dob=parse_time(data.get("dob")),
            country=data.get("country") or "",
            id_docs=[IDDoc.from_dict(d) for d in data.get("idDocs") or []],
        )


@dataclass
class Agreement:
    """Applicant consent record."""

    created_at: datetime | None = None
    accepted_at: datetime | None = None
    source: str = ""
    record_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Agreement:
        return cls(
            created_at=parse_time(data.get("createdAt")),
            accepted_at=parse_time(data.get("acceptedAt")),
            source=data.get("source") or "",
            record_ids=list(data.get("recordIds") or []),
        )


@dataclass
class Review:
    """Review summary embedded in applicant data."""

    review_id: str = ""
    attempt_id: str = ""
    attempt_cnt: int = 0
    level_name: str = ""
    level_auto_check_mode: str = ""
    create_date: datetime | None = None
    review_status: str = ""
    priority: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Review:
        return cls(
            review_id=data.get("reviewId") or "",
            attempt_id=data.get("attemptId") or "",
            attempt_cnt=int(data.get("attemptCnt") or 0),
            level_name=data.get("levelName") or "",
            level_auto_check_mode=data.get("levelAutoCheckMode") or "",
            create_date=parse_time(data.get("createDate")),
            review_status=data.get("reviewStatus") or "",
            priority=int(data.get("priority") or 0),
        )


@dataclass
class DocSet:
    """One required document set."""

    id_doc_set_type: str = ""


@dataclass
class Applicant:
    """Applicant data."""

    id: str = ""
    created_at: datetime | None = None
    created_by: str = ""
    key: str = ""
    client_id: str = ""
    inspection_id: str = ""
    external_user_id: str = ""
    fixed_info: FixedInfo = field(default_factory=FixedInfo)
    info: Info = field(default_factory=Info)
    email: str = ""
    applicant_platform: str = ""
    agreement: Agreement = field(default_factory=Agreement)
    review: Review = field(default_factory=Review)
    required_doc_sets: list[DocSet] = field(default_factory=list)
    lang: str = ""
    type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Applicant:
        required = data.get("requiredIdDocs") or {}
        return cls(
            id=data.get("id") or "",
            created_at=parse_time(data.get("createdAt")),
            created_by=data.get("createdBy") or "",
            key=data.get("key") or "",
            client_id=data.get("clientId") or "",
            inspection_id=data.get("inspectionId") or "",
            external_user_id=data.get("externalUserId") or "",
            fixed_info=FixedInfo.from_dict(data.get("fixedInfo") or {}),
            info=Info.from_dict(data.get("info") or {}),
            email=data.get("email") or "",
            applicant_platform=data.get("applicantPlatform") or "",
            agreement=Agreement.from_dict(data.get("agreement") or {}),
            review=Review.from_dict(data.get("review") or {}),
            required_doc_sets=[
                DocSet(id_doc_set_type=s.get("idDocSetType") or "")
                for s in required.get("docSets") or []
            ],
            lang=data.get("lang") or "",
            type=data.get("type") or "",
        )


@dataclass
class CreateApplicantRequest:
    """Parameters for creating an applicant."""

    external_user_id: str
    fixed_info: FixedInfo = field(default_factory=FixedInfo)
    email: str | None = None
    phone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fixedInfo": self.fixed_info.to_dict(),
            "externalUserId": self.external_user_id,
            "email": self.email,
            "phone": self.phone,
        }


@dataclass
class CreatedApplicant:
    """Identifier of a newly created applicant.

    Fetch the full record with :meth:`Client.applicant_data`.
    """

    id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreatedApplicant:
        return cls(id=data.get("id") or "")


@dataclass
class HealthStatus:
    """API status answer. The endpoint returns an empty object."""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HealthStatus:
        return cls()
