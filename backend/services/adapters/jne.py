"""Adapter for the JNE electoral platform payload (hoja de vida)."""

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


class JNEAdapter(BaseSourceAdapter):
    """Maps the scraped/API JNE candidate shape to a RawRecord.

    Detailed sentence arrays (``*_sentences_detail``) win over the legacy
    ``declared_sentences`` list. Sentences declared on the hoja de vida form
    are final convictions by construction, so legacy penal entries are tagged
    as firm.
    """

    source_name = "jne"

    def adapt(self, payload: dict[str, Any]) -> RawRecord:
        payload = payload if isinstance(payload, dict) else {}
        penal, civil = self._sentences(payload)

        return RawRecord(
            education=[self._education(e) for e in as_dicts(payload.get("education"))],
            experience=[self._experience(e) for e in as_dicts(payload.get("experience"))],
            trajectory=[
                self._trajectory(t) for t in as_dicts(payload.get("political_trajectory"))
            ],
            penal_sentences=penal,
            civil_sentences=civil,
            party_resignations=self._resignations(payload),
            sentences_declared=(
                as_bool(payload.get("has_declared_sentences"))
                or any(
                    key in payload
                    for key in ("penal_sentences_detail", "civil_sentences_detail",
                                "declared_sentences")
                )
            ),
            assets=self._assets(payload),
            birth_date=as_text(payload.get("birth_date")),
            dni=as_text(payload.get("dni")),
            plan_url=as_text(first(payload, "plan_url", "plan_gobierno_url")),
            declaration_url=as_text(payload.get("djhv_url")),
            verification=VerificationMetadata(
                data_verified=as_bool(payload.get("data_verified")),
                data_source=as_text(payload.get("data_source")) or self.source_name,
                sources_checked=[str(s) for s in as_list(payload.get("sources_checked"))],
            ),
        )

    @staticmethod
    def _education(entry: dict) -> RawEducation:
        return RawEducation(
            level=as_text(entry.get("level")),
            degree=as_text(entry.get("degree")),
            field=as_text(first(entry, "field", "career", "carrera")),
            institution=as_text(entry.get("institution")),
            year=parse_year(entry.get("year")),
            is_completed=as_optional_bool(first(entry, "is_completed", "concluido")),
        )

    @staticmethod
    def _experience(entry: dict) -> RawExperience:
        return RawExperience(
            position=as_text(entry.get("position")),
            organization=as_text(entry.get("organization")),
            sector=as_text(entry.get("sector")),
            start_year=parse_year(entry.get("start_year")),
            end_year=parse_year(entry.get("end_year")),
            is_current=as_bool(entry.get("is_current")),
        )

    @staticmethod
    def _trajectory(entry: dict) -> RawTrajectory:
        return RawTrajectory(
            position=as_text(entry.get("position")),
            organization=as_text(first(entry, "party", "institution")),
            kind=as_text(first(entry, "kind", "tipo", "type")),
            start_year=parse_year(entry.get("start_year")),
            end_year=parse_year(entry.get("end_year")),
            is_elected=as_bool(entry.get("is_elected")),
        )

    @staticmethod
    def _sentences(payload: dict) -> tuple[list[RawPenalSentence], list[RawCivilSentence]]:
        penal_detail = as_dicts(payload.get("penal_sentences_detail"))
        civil_detail = as_dicts(payload.get("civil_sentences_detail"))
        legacy = as_dicts(payload.get("declared_sentences"))

        penal = [
            RawPenalSentence(
                description=as_text(s.get("delito")),
                status="cumplida" if as_bool(s.get("rehabilitado")) else as_text(s.get("estado")),
                modality=as_text(s.get("tipo_pena")),
                year=parse_year(s.get("fecha_sentencia")),
            )
            for s in penal_detail
        ]
        civil = [
            RawCivilSentence(
                kind=as_text(s.get("tipo")),
                description=as_text(s.get("descripcion")),
                status=as_text(s.get("estado")),
                year=parse_year(s.get("fecha_sentencia")),
            )
            for s in civil_detail
        ]

        if not penal_detail:
            penal = [
                RawPenalSentence(
                    description=as_text(s.get("description")),
                    status="firme",
                    year=parse_year(s.get("date")),
                )
                for s in legacy
                if str(s.get("type", "")).lower() == "penal"
            ]
        if not civil_detail:
            civil = [
                RawCivilSentence(
                    description=as_text(s.get("description")),
                    year=parse_year(s.get("date")),
                )
                for s in legacy
                if str(s.get("type", "")).lower() == "civil"
            ]
        return penal, civil

    @staticmethod
    def _resignations(payload: dict) -> int:
        detail = payload.get("party_resignations_detail")
        if isinstance(detail, list):
            return len(detail)
        value = payload.get("party_resignations")
        if isinstance(value, list):
            return len(value)
        return as_count(value)

    @staticmethod
    def _assets(payload: dict) -> AssetDeclaration | None:
        assets = payload.get("assets")
        if not isinstance(assets, dict):
            return None
        properties = as_float(assets.get("properties"))
        vehicles = as_float(assets.get("vehicles"))
        total_income = first(assets, "total_income", "income")
        return AssetDeclaration(
            public_salary=as_float(assets.get("public_salary")),
            public_rent=as_float(assets.get("public_rent")),
            public_other=as_float(assets.get("public_other")),
            private_salary=as_float(assets.get("private_salary")),
            private_rent=as_float(assets.get("private_rent")),
            private_other=as_float(assets.get("private_other")),
            total_income=None if total_income is None else as_float(total_income),
            vehicle_count=1 if vehicles > 0 else 0,
            vehicle_total=vehicles,
            real_estate_count=1 if properties > 0 else 0,
            real_estate_total=properties,
        )
