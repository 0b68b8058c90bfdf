"""Keyword classification of raw record entries into closed taxonomies.

Every public function is total: unrecognised, empty or malformed input maps
to the fallback member of the target taxonomy instead of raising.
"""

import logging
import re
import unicodedata
from typing import Any

from models.schemas.taxonomy import (
    LEADERSHIP_LEVELS,
    CivilType,
    EducationLevel,
    RoleType,
    SeniorityLevel,
    SentenceStatus,
)

logger = logging.getLogger(__name__)

_NON_WORD_RE = re.compile(r"[^a-z0-9]+")


def normalize_text(value: Any) -> str:
    """Lowercase, strip diacritics and collapse punctuation to single spaces."""
    if value is None:
        return ""
    text = unicodedata.normalize("NFD", str(value))
    text = "".join(ch for ch in text if unicodedata.category(ch) != "Mn")
    return _NON_WORD_RE.sub(" ", text.lower()).strip()


def _compile(patterns: list[str]) -> re.Pattern:
    return re.compile(rf"\b(?:{'|'.join(patterns)})\b")


def _field(entry: Any, *names: str) -> Any:
    """Read the first present attribute or key out of a model, dict or string."""
    if entry is None:
        return None
    for name in names:
        if isinstance(entry, dict):
            value = entry.get(name)
        else:
            value = getattr(entry, name, None)
        if value is not None:
            return value
    return None


def _text(entry: Any, *names: str) -> str:
    if isinstance(entry, str):
        return normalize_text(entry)
    return normalize_text(_field(entry, *names))


# ---------------------------------------------------------------------------
# Education level
# ---------------------------------------------------------------------------

EDUCATION_PATTERNS: dict[str, list[str]] = {
    "doctorado": [r"doctorad[oa]s?", r"doctor en", r"phd", r"ph d"],
    "maestria": [
        r"maestri[ao]s?", r"magister", r"maestro en", r"master", r"mba",
        r"posgrado", r"postgrado",
    ],
    "no_universitario": [r"superior no universitari[oa]", r"no universitari[oa]"],
    "universitario": [
        r"universitari[oa]", r"universidad", r"licenciatura", r"pregrado",
        r"bachiller", r"bachillerato",
    ],
    "tecnico": [
        r"tecnic[oa]", r"tecnologic[oa]", r"instituto", r"superior tecnic[oa]",
    ],
    "secundaria": [r"secundari[oa]"],
    "primaria": [r"primari[oa]"],
}

# Licensed professions that imply a professional title
PROFESSION_PATTERNS = [
    r"titulo", r"titulad[oa]", r"licenciad[oa]", r"ingenier[oa]", r"abogad[oa]",
    r"medic[oa]", r"cirujan[oa]", r"contador(?:a)?", r"arquitect[oa]",
    r"economista", r"odontolog[oa]", r"enfermer[oa]", r"psicolog[oa]",
    r"obstetr[ai]z?", r"veterinari[oa]", r"quimic[oa] farmaceutic[oa]",
]

_EDU_COMPILED = {name: _compile(p) for name, p in EDUCATION_PATTERNS.items()}
_PROFESSION_RE = _compile(PROFESSION_PATTERNS)
_BACHELOR_RE = _compile([r"bachiller", r"bachillerato"])
_COMPLETED_RE = _compile([
    r"complet[oa]", r"concluid[oa]", r"egresad[oa]", r"culminad[oa]", r"graduad[oa]",
])
_INCOMPLETE_RE = _compile([
    r"incomplet[oa]", r"trunc[oa]", r"en curso", r"cursando", r"inconclus[oa]",
])

_LEGACY_EDUCATION = {level.value: level for level in EducationLevel}
_LEGACY_EDUCATION["primaria_completa"] = EducationLevel.PRIMARIA
_LEGACY_EDUCATION["primaria_incompleta"] = EducationLevel.PRIMARIA


def _is_completed(entry: Any, text: str) -> bool:
    flag = _field(entry, "is_completed")
    if isinstance(flag, bool):
        return flag
    if _INCOMPLETE_RE.search(text):
        return False
    return bool(_COMPLETED_RE.search(text))


def classify_education(entry: Any) -> EducationLevel:
    """Map an education entry (or a bare level string) to an EducationLevel."""
    if isinstance(entry, EducationLevel):
        return entry

    raw_level = entry if isinstance(entry, str) else _field(entry, "level")
    if isinstance(raw_level, str):
        legacy = _LEGACY_EDUCATION.get(raw_level.strip().lower())
        if legacy is not None:
            return legacy

    level = _text(entry, "level")
    degree = "" if isinstance(entry, str) else _text(entry, "degree")
    text = f"{level} {degree}".strip()
    if not text:
        return EducationLevel.SIN_INFORMACION

    if _EDU_COMPILED["doctorado"].search(text):
        return EducationLevel.DOCTORADO
    if _EDU_COMPILED["maestria"].search(text):
        return EducationLevel.MAESTRIA

    non_university = bool(_EDU_COMPILED["no_universitario"].search(text))
    if not non_university and _EDU_COMPILED["universitario"].search(text):
        if _field(entry, "has_title") is True or _PROFESSION_RE.search(degree):
            return EducationLevel.TITULO_PROFESIONAL
        if (
            _field(entry, "has_bachelor") is True
            or _BACHELOR_RE.search(text)
            or _is_completed(entry, text)
        ):
            return EducationLevel.UNIVERSITARIO_COMPLETO
        return EducationLevel.UNIVERSITARIO_INCOMPLETO

    if non_university or _EDU_COMPILED["tecnico"].search(text):
        if _is_completed(entry, text):
            return EducationLevel.TECNICO_COMPLETO
        return EducationLevel.TECNICO_INCOMPLETO
    if _EDU_COMPILED["secundaria"].search(text):
        if _is_completed(entry, text):
            return EducationLevel.SECUNDARIA_COMPLETA
        return EducationLevel.SECUNDARIA_INCOMPLETA
    if _EDU_COMPILED["primaria"].search(text):
        return EducationLevel.PRIMARIA

    # A degree naming a licensed profession with no level still implies one
    if _PROFESSION_RE.search(degree):
        return EducationLevel.TITULO_PROFESIONAL
    return EducationLevel.SIN_INFORMACION


# ---------------------------------------------------------------------------
# Role type
# ---------------------------------------------------------------------------

ROLE_PATTERNS: dict[str, list[str]] = {
    "electivo_medio": [
        r"regidor(?:a|es)?", r"consejer[oa] regional", r"alcalde(?:sa)? distrital",
        r"teniente alcalde",
    ],
    "electivo_alto": [
        r"congresista", r"senador(?:a)?", r"diputad[oa]", r"alcalde(?:sa)?",
        r"gobernador(?:a)?", r"president[ea] regional", r"parlamentari[oa] andin[oa]",
        r"president[ea] de la republica", r"vicepresident[ea] de la republica",
        r"representante al congreso",
    ],
    "ejecutivo_publico_alto": [
        r"ministr[oa]", r"viceministr[oa]", r"embajador(?:a)?", r"secretari[oa] general",
        r"jefe institucional", r"superintendente", r"contralor(?:a)?",
        r"defensor(?:a)? del pueblo", r"prefect[oa]", r"fiscal de la nacion",
    ],
    "public_org": [
        r"ministerio", r"gobierno", r"municipalidad", r"congreso", r"poder judicial",
        r"fiscalia", r"ministerio publico", r"contraloria", r"defensoria",
        r"fuerzas armadas", r"ejercito", r"marina de guerra", r"fuerza aerea",
        r"policia", r"essalud", r"sunat", r"superintendencia", r"jurado nacional",
        r"onpe", r"reniec", r"banco central de reserva", r"estado peruano",
        r"gobierno regional", r"presidencia del consejo",
    ],
    "public_sector": [r"public[oa]", r"estatal", r"estado"],
    "public_senior_in_org": [
        r"director(?:a)? general", r"comandante general", r"jefe institucional",
        r"president[ea] ejecutiv[oa]",
    ],
    "manager": [
        r"director(?:a)?", r"gerente", r"subgerente", r"jef[ea]", r"comandante",
        r"oficial superior", r"administrador(?:a)?", r"president[ea]",
    ],
    "academia": [
        r"rector(?:a)?", r"vicerrector(?:a)?", r"decan[oa]", r"catedratic[oa]",
        r"profesor(?:a)?", r"docente", r"investigador(?:a)?",
    ],
    "academic_org": [r"universidad", r"instituto", r"escuela superior", r"colegio"],
    "non_academic_role": [r"director(?:a)?", r"gerente", r"empresari[oa]"],
    "ejecutivo_privado_alto": [
        r"gerente general", r"director(?:a)?", r"ceo", r"president[ea] ejecutiv[oa]",
        r"president[ea] del directorio", r"empresari[oa]", r"fundador(?:a)?",
        r"propietari[oa]", r"titular gerente",
    ],
    "ejecutivo_privado_medio": [
        r"gerente", r"subgerente", r"jef[ea]", r"administrador(?:a)?",
        r"supervisor(?:a)?",
    ],
    "internacional": [
        r"naciones unidas", r"onu", r"oea", r"bid", r"banco mundial",
        r"banco interamericano", r"fmi", r"fondo monetario", r"comunidad andina",
        r"unesco", r"unicef", r"pnud", r"oit", r"oms", r"ops", r"fao", r"cepal",
        r"union europea", r"usaid", r"organismo internacional",
    ],
    "partidario": [
        r"partido", r"militante", r"afiliad[oa]", r"personer[oa]", r"delegad[oa]",
        r"dirigente", r"comite ejecutivo", r"movimiento regional", r"secretari[oa] de organizacion",
    ],
}

_ROLE_COMPILED = {name: _compile(p) for name, p in ROLE_PATTERNS.items()}
_PARTY_ORG_RE = _compile([r"partido", r"movimiento regional", r"alianza electoral"])


def classify_role_type(entry: Any) -> RoleType:
    """Classify a work or trajectory entry by position, organization and sector."""
    if isinstance(entry, RoleType):
        return entry
    position = _text(entry, "position", "role")
    organization = "" if isinstance(entry, str) else _text(entry, "organization")
    sector = "" if isinstance(entry, str) else _text(entry, "sector")
    if not position and not organization:
        return RoleType.TECNICO_PROFESIONAL

    rc = _ROLE_COMPILED
    party_org = bool(_PARTY_ORG_RE.search(organization))

    if rc["electivo_medio"].search(position):
        return RoleType.ELECTIVO_MEDIO
    if rc["electivo_alto"].search(position):
        return RoleType.ELECTIVO_ALTO
    if not party_org and rc["ejecutivo_publico_alto"].search(position):
        return RoleType.EJECUTIVO_PUBLICO_ALTO

    public = bool(rc["public_org"].search(organization) or rc["public_sector"].search(sector))
    if public and not party_org:
        if rc["public_senior_in_org"].search(position):
            return RoleType.EJECUTIVO_PUBLICO_ALTO
        if rc["manager"].search(position):
            return RoleType.EJECUTIVO_PUBLICO_MEDIO

    if rc["academia"].search(position):
        return RoleType.ACADEMIA
    if rc["academic_org"].search(organization) and not rc["non_academic_role"].search(position):
        return RoleType.ACADEMIA

    if not party_org:
        if rc["ejecutivo_privado_alto"].search(position):
            return RoleType.EJECUTIVO_PRIVADO_ALTO
        if rc["ejecutivo_privado_medio"].search(position):
            return RoleType.EJECUTIVO_PRIVADO_MEDIO

    if rc["internacional"].search(organization):
        return RoleType.INTERNACIONAL
    if party_org or rc["partidario"].search(position):
        return RoleType.PARTIDARIO
    return RoleType.TECNICO_PROFESIONAL


# ---------------------------------------------------------------------------
# Seniority ladder
# ---------------------------------------------------------------------------

SENIORITY_PATTERNS: dict[SeniorityLevel, list[str]] = {
    SeniorityLevel.DIRECCION: [
        r"president[ea]", r"vicepresident[ea]", r"rector(?:a)?", r"ministr[oa]",
        r"viceministr[oa]", r"alcalde(?:sa)?", r"gobernador(?:a)?", r"congresista",
        r"senador(?:a)?", r"diputad[oa]", r"director(?:a)? general",
        r"director(?:a)? ejecutiv[oa]", r"ceo", r"gerente general",
        r"comandante general", r"secretari[oa] general", r"embajador(?:a)?",
        r"superintendente", r"contralor(?:a)?", r"fiscal",
    ],
    SeniorityLevel.GERENCIA: [
        r"gerente", r"director(?:a)?", r"decan[oa]", r"oficial superior",
        r"empresari[oa]", r"fundador(?:a)?", r"propietari[oa]",
    ],
    SeniorityLevel.JEFATURA: [
        r"jef[ea]", r"subgerente", r"regidor(?:a)?",
        r"supervisor(?:a)?", r"administrador(?:a)?", r"consejer[oa]",
    ],
    SeniorityLevel.COORDINADOR: [
        r"coordinador(?:a)?", r"profesor(?:a)?", r"catedratic[oa]", r"docente",
        r"especialista", r"analista", r"abogad[oa]", r"ingenier[oa]",
        r"consultor(?:a)?", r"investigador(?:a)?", r"asesor(?:a)?",
    ],
}

_SENIORITY_COMPILED = {level: _compile(p) for level, p in SENIORITY_PATTERNS.items()}


def classify_seniority(entry: Any) -> SeniorityLevel:
    """Place a position on the seniority ladder; first rung that matches wins."""
    if isinstance(entry, SeniorityLevel):
        return entry
    position = _text(entry, "position", "role")
    for level, pattern in _SENIORITY_COMPILED.items():
        if pattern.search(position):
            return level
    return SeniorityLevel.INDIVIDUAL_CONTRIBUTOR


def is_leadership(level: SeniorityLevel) -> bool:
    return level in LEADERSHIP_LEVELS


# ---------------------------------------------------------------------------
# Political trajectory
# ---------------------------------------------------------------------------

_ELECTED_KIND_RE = _compile([r"cargo electivo", r"electiv[oa]", r"eleccion popular"])
_PUBLIC_KIND_RE = _compile([r"cargo publico", r"publico", r"designad[oa]", r"confianza"])


def classify_trajectory(entry: Any) -> tuple[RoleType, SeniorityLevel]:
    """Role type and seniority of a political trajectory entry.

    Elected posts and public appointments sit at the top of the ladder; other
    trajectory entries are party roles at coordinator level.
    """
    kind = _text(entry, "kind", "type")
    elected = _field(entry, "is_elected") is True or bool(_ELECTED_KIND_RE.search(kind))
    if elected:
        role_type = classify_role_type(entry)
        if role_type not in (RoleType.ELECTIVO_ALTO, RoleType.ELECTIVO_MEDIO):
            role_type = RoleType.ELECTIVO_ALTO
        return role_type, SeniorityLevel.DIRECCION
    if _PUBLIC_KIND_RE.search(kind):
        return RoleType.EJECUTIVO_PUBLICO_ALTO, SeniorityLevel.DIRECCION
    return RoleType.PARTIDARIO, SeniorityLevel.COORDINADOR


# ---------------------------------------------------------------------------
# Penal sentence firmness
# ---------------------------------------------------------------------------

_IN_PROCESS_RE = _compile([
    r"no firme", r"en proceso", r"proceso", r"apelacion", r"apelad[oa]",
    r"investigacion", r"pendiente", r"casacion", r"impugnad[oa]", r"tramite",
    r"recurso de nulidad",
])
_FINAL_RE = _compile([
    r"firme", r"consentid[oa]", r"ejecutoriad[oa]", r"ejecutad[oa]", r"efectiv[oa]",
    r"suspendid[oa]", r"cumplid[oa]", r"reserva (?:de )?fallo", r"rehabilitad[oa]",
    r"condenad[oa]",
])


def classify_firmness(entry: Any) -> SentenceStatus:
    """Whether a penal sentence is final/enforced or still in process."""
    if isinstance(entry, SentenceStatus):
        return entry
    status = _text(entry, "status")
    if status:
        if _IN_PROCESS_RE.search(status):
            return SentenceStatus.EN_PROCESO
        if _FINAL_RE.search(status):
            return SentenceStatus.FIRME
    modality = "" if isinstance(entry, str) else _text(entry, "modality")
    if modality and not _IN_PROCESS_RE.search(modality) and _FINAL_RE.search(modality):
        return SentenceStatus.FIRME
    return SentenceStatus.EN_PROCESO


# ---------------------------------------------------------------------------
# Civil sentence type
# ---------------------------------------------------------------------------

CIVIL_PATTERNS: dict[CivilType, list[str]] = {
    CivilType.VIOLENCE: [
        r"violencia", r"violencia familiar", r"agresion(?:es)?", r"maltrato",
        r"lesiones", r"feminicidio", r"acoso", r"contra la mujer",
        r"integrantes del grupo familiar",
    ],
    CivilType.ALIMONY: [
        r"alimentos?", r"alimentari[oa]", r"alimenticia", r"asistencia familiar",
    ],
    CivilType.LABOR: [
        r"laboral(?:es)?", r"trabajador(?:es)?", r"despido", r"beneficios sociales",
        r"remuneracion(?:es)?", r"cts", r"sunafil",
    ],
    CivilType.CONTRACTUAL: [
        r"contrat[oa]s?", r"contractual", r"obligacion de dar", r"dar suma de dinero",
        r"deuda", r"incumplimiento", r"desalojo", r"indemnizacion", r"arrendamiento",
        r"mutuo", r"letra de cambio", r"ejecucion de garantia", r"pago de",
    ],
}

_CIVIL_COMPILED = {civil_type: _compile(p) for civil_type, p in CIVIL_PATTERNS.items()}


def classify_civil_type(entry: Any) -> CivilType:
    """Triage a civil sentence by its type and description text."""
    if isinstance(entry, CivilType):
        return entry
    if isinstance(entry, str):
        text = normalize_text(entry)
    else:
        text = f"{_text(entry, 'kind', 'type')} {_text(entry, 'description')}"
    for civil_type, pattern in _CIVIL_COMPILED.items():
        if pattern.search(text):
            return civil_type
    return CivilType.OTHER


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

_CLASSIFIERS = {
    "education": (classify_education, EducationLevel.SIN_INFORMACION),
    "role": (classify_role_type, RoleType.TECNICO_PROFESIONAL),
    "seniority": (classify_seniority, SeniorityLevel.INDIVIDUAL_CONTRIBUTOR),
    "firmness": (classify_firmness, SentenceStatus.EN_PROCESO),
    "civil_type": (classify_civil_type, CivilType.OTHER),
}

CLASSIFIER_KINDS = tuple(_CLASSIFIERS)


def classify(raw_entry: Any, kind: str):
    """Classify one raw entry into the taxonomy named by ``kind``.

    Never raises on data; an entry that cannot be read yields the fallback.
    """
    try:
        func, fallback = _CLASSIFIERS[kind]
    except KeyError:
        raise ValueError(f"Unknown classifier kind: {kind}") from None
    try:
        return func(raw_entry)
    except Exception:
        logger.debug("Unreadable %s entry, using fallback %s", kind, fallback.value, exc_info=True)
        return fallback
