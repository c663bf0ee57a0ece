"""Pydantic schemas for the 4-step tenant onboarding wizard.

Draft layout:
    personal_info   {date_of_birth, occupation, emergency_contact{name, phone, email}}
    financial_info  {income_proof: [file]}
    documents       {id_document: [file], proof_of_income?, proof_of_residence?}
    guarantor?      {name, email, phone, occupation,
                     documents{proof_of_income, proof_of_residence}}

A file entry is an uploaded URL, or a file still waiting for the upload
phase.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.schemas.validators import validate_email, validate_file_refs, validate_phone


def _require_files(values: list[Any], message: str) -> list[Any]:
    if not values:
        raise ValueError(message)
    return validate_file_refs(values)


# ── Step 1: Personal info ───────────────────────────────────

class EmergencyContact(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str
    email: str

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validate_email(v)


class PersonalInfo(BaseModel):
    date_of_birth: date
    occupation: str = Field(..., min_length=1, max_length=100)
    emergency_contact: EmergencyContact

    @field_validator("date_of_birth")
    @classmethod
    def _in_the_past(cls, v: date) -> date:
        if v >= date.today():
            raise ValueError("Date of birth must be in the past")
        return v


# ── Step 2: Financial info ──────────────────────────────────

class FinancialInfo(BaseModel):
    income_proof: list[Any] = Field(default_factory=list, validate_default=True)

    @field_validator("income_proof")
    @classmethod
    def _files(cls, v: list[Any]) -> list[Any]:
        return _require_files(v, "At least one income proof document is required")


# ── Step 3: Documents ───────────────────────────────────────

class DocumentSet(BaseModel):
    id_document: list[Any] = Field(default_factory=list, validate_default=True)
    proof_of_income: list[Any] | None = None
    proof_of_residence: list[Any] | None = None

    @field_validator("id_document")
    @classmethod
    def _id_document(cls, v: list[Any]) -> list[Any]:
        return _require_files(v, "ID document is required")

    @field_validator("proof_of_income", "proof_of_residence")
    @classmethod
    def _optional_files(cls, v: list[Any] | None) -> list[Any] | None:
        return None if v is None else validate_file_refs(v)


# ── Step 4: Guarantor (optional) ────────────────────────────

class GuarantorDocuments(BaseModel):
    proof_of_income: list[Any] = Field(default_factory=list, validate_default=True)
    proof_of_residence: list[Any] = Field(default_factory=list, validate_default=True)

    @field_validator("proof_of_income")
    @classmethod
    def _income(cls, v: list[Any]) -> list[Any]:
        return _require_files(v, "Income proof is required")

    @field_validator("proof_of_residence")
    @classmethod
    def _residence(cls, v: list[Any]) -> list[Any]:
        return _require_files(v, "Proof of residence is required")


class Guarantor(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str
    phone: str
    occupation: str = Field(..., min_length=1, max_length=100)
    documents: GuarantorDocuments

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validate_email(v)
