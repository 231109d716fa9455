from __future__ import annotations

from .contract_effects import (
    GATE_CID,
    SWAMP_KING_CID,
    WITCH_CID,
    ZERO_KING_CID,
    GateEffect,
    SwampKingEffect,
    WitchEffect,
    ZeroKingEffect,
)
from .dd_monster_effects import (
    COPERNICUS_CID,
    COUNT_SURVEYOR_CID,
    DEFENSE_SOLDIER_CID,
    GRYPHON_CID,
    KEPLER_CID,
    LANCE_SOLDIER_CID,
    NECRO_SLIME_CID,
    ORTHROS_CID,
    SCALE_SURVEYOR_CID,
    THOMAS_CID,
    CopernicusEffect,
    CountSurveyorEffect,
    DefenseSoldierEffect,
    GryphonEffect,
    KeplerEffect,
    LanceSoldierEffect,
    NecroSlimeEffect,
    OrthrosEffect,
    ScaleSurveyorEffect,
    ThomasEffect,
)
from .ddd_effects import (
    ABYSS_RAGNAROK_CID,
    ALFRED_CID,
    CLOVIS_CID,
    FLAME_KING_GENGHIS_CID,
    GILGAMESH_CID,
    HIGH_KING_GENGHIS_CID,
    SIEGFRIED_CID,
    SOLOMON_CID,
    TELL_CID,
    WAVE_HIGH_KING_CAESAR_CID,
    WAVE_KING_CAESAR_CID,
    ZERO_MACHINEX_CID,
    ZEUS_RAGNAROK_CID,
    AbyssRagnarokEffect,
    AlfredEffect,
    CaesarEffect,
    ClovisEffect,
    GenghisEffect,
    GilgameshEffect,
    SiegfriedEffect,
    SolomonEffect,
    TellEffect,
    ZeroMachinexEffect,
    ZeusRagnarokEffect,
)
from .inert_effects import INERT_EFFECT_CIDS, InertEffect
from .types import EffectImpl

EFFECT_REGISTRY: dict[str, EffectImpl] = {}


def register_effect(cid: str, effect: EffectImpl) -> None:
    EFFECT_REGISTRY[cid] = effect


def modeled_card_ids() -> list[str]:
    """Card ids with a handler that does something beyond announcing itself."""
    return sorted(cid for cid, effect in EFFECT_REGISTRY.items() if not isinstance(effect, InertEffect))


register_effect(KEPLER_CID, KeplerEffect())
register_effect(COPERNICUS_CID, CopernicusEffect())
register_effect(THOMAS_CID, ThomasEffect())
register_effect(ORTHROS_CID, OrthrosEffect())
register_effect(COUNT_SURVEYOR_CID, CountSurveyorEffect())
register_effect(GRYPHON_CID, GryphonEffect())
register_effect(SCALE_SURVEYOR_CID, ScaleSurveyorEffect())
register_effect(NECRO_SLIME_CID, NecroSlimeEffect())
register_effect(LANCE_SOLDIER_CID, LanceSoldierEffect())
register_effect(DEFENSE_SOLDIER_CID, DefenseSoldierEffect())

register_effect(FLAME_KING_GENGHIS_CID, GenghisEffect())
register_effect(HIGH_KING_GENGHIS_CID, GenghisEffect())
register_effect(ABYSS_RAGNAROK_CID, AbyssRagnarokEffect())
register_effect(GILGAMESH_CID, GilgameshEffect())
register_effect(SIEGFRIED_CID, SiegfriedEffect())
register_effect(TELL_CID, TellEffect())
register_effect(WAVE_KING_CAESAR_CID, CaesarEffect())
register_effect(WAVE_HIGH_KING_CAESAR_CID, CaesarEffect())
register_effect(SOLOMON_CID, SolomonEffect())
register_effect(CLOVIS_CID, ClovisEffect())
register_effect(ALFRED_CID, AlfredEffect())
register_effect(ZEUS_RAGNAROK_CID, ZeusRagnarokEffect())
register_effect(ZERO_MACHINEX_CID, ZeroMachinexEffect())

register_effect(GATE_CID, GateEffect())
register_effect(SWAMP_KING_CID, SwampKingEffect())
register_effect(WITCH_CID, WitchEffect())
register_effect(ZERO_KING_CID, ZeroKingEffect())

for cid in sorted(INERT_EFFECT_CIDS.keys()):
    register_effect(cid, InertEffect(announce=INERT_EFFECT_CIDS[cid]))
