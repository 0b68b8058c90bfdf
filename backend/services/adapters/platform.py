"""Adapter for the platform database row shape (candidate + jsonb detail columns)."""

from typing import Any

from models.schemas.raw_record import (
    AssetDeclaration,
    RawCivilSentence,
    RawEducation,
    RawExperience,
    RawPenalSentence,
    RawRecord,
    RawTrajectory,
    VerificationMetadata,
)
from services.adapters.base import (
    BaseSourceAdapter,
    as_bool,
    as_count,
    as_dicts,
    as_float,
    as_list,
    as_optional_bool,
    as_text,
    first,
    parse_year,
)


def _optional_level(value: Any) -> float | None:
    if value is None:
        return None
    return as_float(value)


def _verification_field(verification: Any, payload: dict, key: str) -> Any:
    """Nested verification value, else the top-level one; zero and empty still count."""
    value = first(verification, key)
    return payload.get(key) if value is None else value


class PlatformAdapter(BaseSourceAdapter):
    """Maps a stored candidate row to a RawRecord.

    Rows written by different sync jobs disagree on key names (``start_year``
    vs ``start_date``, ``year_start`` vs ``year``...), so every field is read
    through an ordered list of aliases.
    """

    source_name = "platform"

    def adapt(self, payload: dict[str, Any]) -> RawRecord:
        payload = payload if isinstance(payload, dict) else {}

        trajectory = [
            self._trajectory(t) for t in as_dicts(payload.get("political_trajectory"))
        ]
        resignations = payload.get("party_resignations")
        verification = first(payload, "verification") or {}

        return RawRecord(
            education=[self._education(e) for e in as_dicts(payload.get("education_details"))],
            experience=[
                self._experience(e) for e in as_dicts(payload.get("experience_details"))
            ],
            trajectory=trajectory,
            penal_sentences=[
                self._penal(s) for s in as_dicts(payload.get("penal_sentences"))
            ],
            civil_sentences=[
                self._civil(s) for s in as_dicts(payload.get("civil_sentences"))
            ],
            party_resignations=(
                len(resignations) if isinstance(resignations, list) else as_count(resignations)
            ),
            sentences_declared=(
                isinstance(payload.get("penal_sentences"), list)
                and isinstance(payload.get("civil_sentences"), list)
            ),
            assets=self._assets(payload.get("assets_declaration")),
            birth_date=as_text(payload.get("birth_date")),
            dni=as_text(payload.get("dni")),
            plan_url=as_text(first(payload, "plan_gobierno_url", "plan_url")),
            declaration_url=as_text(first(payload, "djhv_url", "declaration_url")),
            verification=VerificationMetadata(
                data_verified=as_bool(first(payload, "data_verified", "is_verified")),
                data_source=as_text(payload.get("data_source")),
                sources_checked=[
                    str(s) for s in
                    as_list(_verification_field(verification, payload, "sources_checked"))
                ],
                verification_level=_optional_level(
                    _verification_field(verification, payload, "verification_level")
                ),
                coverage_level=_optional_level(
                    _verification_field(verification, payload, "coverage_level")
                ),
            ),
        )

    @staticmethod
    def _education(entry: dict) -> RawEducation:
        return RawEducation(
            level=as_text(entry.get("level")),
            degree=as_text(entry.get("degree")),
            field=as_text(first(entry, "field_of_study", "degree")),
            institution=as_text(entry.get("institution")),
            year=parse_year(first(entry, "bachelor_year", "year", "end_date")),
            is_completed=as_optional_bool(entry.get("is_completed")),
            has_title=as_bool(entry.get("has_title")),
            has_bachelor=as_bool(entry.get("has_bachelor")),
            verified=as_bool(entry.get("is_verified")),
        )

    @staticmethod
    def _experience(entry: dict) -> RawExperience:
        is_current = as_bool(entry.get("is_current"))
        return RawExperience(
            position=as_text(first(entry, "position", "role")),
            organization=as_text(entry.get("organization")),
            sector=as_text(entry.get("sector")),
            start_year=parse_year(first(entry, "start_year", "start_date")),
            end_year=None if is_current else parse_year(first(entry, "end_year", "end_date")),
            is_current=is_current,
        )

    @staticmethod
    def _trajectory(entry: dict) -> RawTrajectory:
        return RawTrajectory(
            position=as_text(entry.get("position")),
            organization=as_text(first(entry, "party", "institution")),
            kind=as_text(entry.get("type")),
            start_year=parse_year(first(entry, "year_start", "start_year", "year")),
            end_year=parse_year(first(entry, "year_end", "end_year")),
            is_elected=as_bool(entry.get("is_elected")),
        )

    @staticmethod
    def _penal(entry: dict) -> RawPenalSentence:
        return RawPenalSentence(
            description=as_text(first(entry, "description", "delito")),
            status=as_text(first(entry, "status", "estado")),
            modality=as_text(first(entry, "modality", "tipo_pena")),
            year=parse_year(first(entry, "date", "fecha_sentencia")),
        )

    @staticmethod
    def _civil(entry: dict) -> RawCivilSentence:
        return RawCivilSentence(
            kind=as_text(first(entry, "type", "tipo")),
            description=as_text(first(entry, "description", "descripcion")),
            status=as_text(first(entry, "status", "estado")),
            year=parse_year(first(entry, "date", "fecha_sentencia")),
        )

    @staticmethod
    def _assets(assets: Any) -> AssetDeclaration | None:
        if not isinstance(assets, dict):
            return None
        total_income = assets.get("total_income")
        return AssetDeclaration(
            public_salary=as_float(assets.get("public_salary")),
            public_rent=as_float(assets.get("public_rent")),
            public_other=as_float(first(assets, "other_public", "public_other")),
            private_salary=as_float(assets.get("private_salary")),
            private_rent=as_float(assets.get("private_rent")),
            private_other=as_float(first(assets, "other_private", "private_other")),
            total_income=None if total_income is None else as_float(total_income),
            vehicle_count=as_count(assets.get("vehicle_count")),
            vehicle_total=as_float(assets.get("vehicle_total")),
            real_estate_count=as_count(assets.get("real_estate_count")),
            real_estate_total=as_float(assets.get("real_estate_total")),
        )
