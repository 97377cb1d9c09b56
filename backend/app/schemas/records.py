from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..services.field_mapping import INBOUND_ALIASES
from ..utils.validation import CANDIDATE_STATUSES, CLIENT_STATUSES, EMAIL_PATTERN


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        """camelCase dict of the fields the caller actually sent."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class _Entry(CamelModel):
    # Older clients send extra keys inside entries; keep them verbatim.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class ExperienceEntry(_Entry):
    year_from: str | int | None = None
    year_to: str | int | None = None
    job_title: str | None = None
    company: str | None = None
    responsibilities: list[str] | str | None = None
    # Shape used by the resume exporter
    title: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    description: list[str] | str | None = None


class EducationEntry(_Entry):
    year_from: str | int | None = None
    year_to: str | int | None = None
    institution: str | None = None
    subject: str | None = None
    degree: str | None = None
    graduation_date: str | None = None


class LanguageEntry(_Entry):
    language: str | None = None
    proficiency: str | None = None


class CertificationEntry(_Entry):
    year: str | int | None = None
    name: str | None = None


def _check_email(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value


def _check_choice(value: str | None, choices: tuple[str, ...]) -> str | None:
    if value is None:
        return None
    value = value.strip().lower()
    if value not in choices:
        raise ValueError(f"Must be one of: {', '.join(choices)}")
    return value


class _PersonFields(CamelModel):
    """Fields shared by candidates and applications."""

    phone: str | None = None
    current_position: str | None = None
    profile: str | None = None
    experience: str | list[ExperienceEntry] | None = None
    education: str | list[EducationEntry] | None = None
    skills: list[str] | str | None = None
    languages: str | list[LanguageEntry] | None = None
    certifications: str | list[CertificationEntry] | None = None
    hobbies: str | None = None
    birth_date: str | None = None
    summary: str | None = None
    availability: bool | str | None = None
    resume_path: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _apply_inbound_aliases(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for alias, target in INBOUND_ALIASES.items():
                if alias in data:
                    value = data.pop(alias)
                    data.setdefault(target, value)
        return data


class CandidateCreate(_PersonFields):
    first_name: str
    last_name: str
    email: str
    location: str | None = None
    notes: str | None = None
    linkedin_url: str | None = None
    status: str | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("status")
    @classmethod
    def _valid_status(cls, v: str | None) -> str | None:
        return _check_choice(v, CANDIDATE_STATUSES)


class CandidateUpdate(_PersonFields):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    location: str | None = None
    notes: str | None = None
    linkedin_url: str | None = None
    status: str | None = None

    @field_validator("first_name", "last_name", "email")
    @classmethod
    def _not_null(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("status")
    @classmethod
    def _valid_status(cls, v: str | None) -> str | None:
        return _check_choice(v, CANDIDATE_STATUSES)


class ApplicationSubmit(_PersonFields):
    """Public submission; any status sent by the form is dropped."""

    first_name: str
    last_name: str
    email: str
    cover_letter: str | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)


class ClientCreate(CamelModel):
    name: str
    email: str
    contact_person: str | None = None
    contact_function: str | None = None
    phone: str | None = None
    address: str | None = None
    industry: str | None = None
    status: str | None = None
    notes: str | None = None
    vat_number: str | None = None

    @field_validator("name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("status")
    @classmethod
    def _valid_status(cls, v: str | None) -> str | None:
        return _check_choice(v, CLIENT_STATUSES)


class ClientUpdate(CamelModel):
    name: str | None = None
    email: str | None = None
    contact_person: str | None = None
    contact_function: str | None = None
    phone: str | None = None
    address: str | None = None
    industry: str | None = None
    status: str | None = None
    notes: str | None = None
    vat_number: str | None = None

    @field_validator("name", "email")
    @classmethod
    def _not_null(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("status")
    @classmethod
    def _valid_status(cls, v: str | None) -> str | None:
        return _check_choice(v, CLIENT_STATUSES)


class ClientLead(CamelModel):
    """Body of the public "become a client" form."""

    name: str
    email: str
    contact_person: str | None = None
    contact_function: str | None = None
    phone: str | None = None
    industry: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None
    vat_number: str | None = None
    project_description: str | None = None
    active: bool | None = None

    @field_validator("name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)

    def to_client_payload(self) -> dict:
        address = ", ".join(
            part.strip()
            for part in (self.address, self.city, self.postal_code, self.country)
            if part and part.strip()
        )
        if self.active is None:
            status = "lead"
        else:
            status = "active" if self.active else "inactive"
        return {
            "name": self.name,
            "contactPerson": self.contact_person,
            "contactFunction": self.contact_function,
            "email": self.email,
            "phone": self.phone,
            "address": address,
            "industry": self.industry,
            "status": status,
            "notes": f"Project description: {self.project_description}" if self.project_description else "",
            "vatNumber": self.vat_number,
        }


class ResumeExportRequest(CamelModel):
    """Candidate-shaped body rendered straight to PDF."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    current_position: str | None = None
    linkedin_url: str | None = None
    summary: str | None = None
    profile: str | None = None
    skills: list[str] | str | None = None
    experience: str | list[ExperienceEntry] | None = None
    education: str | list[EducationEntry] | None = None
    languages: str | list[LanguageEntry] | None = None
    certifications: str | list[CertificationEntry] | None = None

    @model_validator(mode="before")
    @classmethod
    def _apply_inbound_aliases(cls, data: Any) -> Any:
        if isinstance(data, dict) and "workExperience" in data:
            data = dict(data)
            data.setdefault("experience", data.pop("workExperience"))
        return data
