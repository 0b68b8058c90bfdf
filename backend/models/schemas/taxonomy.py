"""Closed taxonomies shared by the classifier, the scorer and the weight tables."""

from enum import Enum


class EducationLevel(str, Enum):
    SIN_INFORMACION = "sin_informacion"
    PRIMARIA = "primaria"
    SECUNDARIA_INCOMPLETA = "secundaria_incompleta"
    SECUNDARIA_COMPLETA = "secundaria_completa"
    TECNICO_INCOMPLETO = "tecnico_incompleto"
    TECNICO_COMPLETO = "tecnico_completo"
    UNIVERSITARIO_INCOMPLETO = "universitario_incompleto"
    UNIVERSITARIO_COMPLETO = "universitario_completo"
    TITULO_PROFESIONAL = "titulo_profesional"
    MAESTRIA = "maestria"
    DOCTORADO = "doctorado"


class RoleType(str, Enum):
    ELECTIVO_ALTO = "electivo_alto"
    ELECTIVO_MEDIO = "electivo_medio"
    EJECUTIVO_PUBLICO_ALTO = "ejecutivo_publico_alto"
    EJECUTIVO_PUBLICO_MEDIO = "ejecutivo_publico_medio"
    EJECUTIVO_PRIVADO_ALTO = "ejecutivo_privado_alto"
    EJECUTIVO_PRIVADO_MEDIO = "ejecutivo_privado_medio"
    ACADEMIA = "academia"
    INTERNACIONAL = "internacional"
    PARTIDARIO = "partidario"
    TECNICO_PROFESIONAL = "tecnico_profesional"


class SeniorityLevel(str, Enum):
    DIRECCION = "direccion"
    GERENCIA = "gerencia"
    JEFATURA = "jefatura"
    COORDINADOR = "coordinador"
    INDIVIDUAL_CONTRIBUTOR = "individual_contributor"


# Top three rungs of the ladder count as leadership
LEADERSHIP_LEVELS = frozenset({
    SeniorityLevel.DIRECCION,
    SeniorityLevel.GERENCIA,
    SeniorityLevel.JEFATURA,
})


class SentenceStatus(str, Enum):
    FIRME = "firme"
    EN_PROCESO = "en_proceso"


class CivilType(str, Enum):
    VIOLENCE = "violence"
    ALIMONY = "alimony"
    LABOR = "labor"
    CONTRACTUAL = "contractual"
    OTHER = "other"


class Category(str, Enum):
    PRESIDENTE = "presidente"
    VICEPRESIDENTE = "vicepresidente"
    SENADOR = "senador"
    DIPUTADO = "diputado"
    PARLAMENTO_ANDINO = "parlamento_andino"


class Pillar(str, Enum):
    COMPETENCE = "competence"
    INTEGRITY = "integrity"
    TRANSPARENCY = "transparency"
    CONFIDENCE = "confidence"
    PLAN_VIABILITY = "plan_viability"


class PresetName(str, Enum):
    BALANCED = "balanced"
    MERIT = "merit"
    INTEGRITY = "integrity"


class WeightMode(str, Enum):
    BALANCED = "balanced"
    MERIT = "merit"
    INTEGRITY = "integrity"
    CUSTOM = "custom"


# Categories whose weight vector carries the plan viability pillar
DISTINGUISHED_CATEGORIES = frozenset({Category.PRESIDENTE})

GENERAL_PILLARS: tuple[Pillar, ...] = (
    Pillar.COMPETENCE,
    Pillar.INTEGRITY,
    Pillar.TRANSPARENCY,
)
DISTINGUISHED_PILLARS: tuple[Pillar, ...] = GENERAL_PILLARS + (Pillar.PLAN_VIABILITY,)


def weighted_pillars(category: Category) -> tuple[Pillar, ...]:
    """Pillars that take part in the composite for a category."""
    if category in DISTINGUISHED_CATEGORIES:
        return DISTINGUISHED_PILLARS
    return GENERAL_PILLARS
