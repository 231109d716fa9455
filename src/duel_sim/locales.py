"""User-visible log and prompt templates.

Every line in ``DuelState.logs`` and every prompt title is produced from a key in
``LOG_TEMPLATES``. Placeholders use ``str.format`` syntax; missing parameters are
left in place so a half-filled template is still readable.
"""

from __future__ import annotations

LOG_TEMPLATES: dict[str, str] = {
    # moves
    "log_ns": "Normal Summoned {card} to Monster Zone {index}.",
    "log_move_to_hand": "Added {card} to the hand.",
    "log_move_to_deck_top": "Returned {card} to the top of the Deck.",
    "log_move_to_gy": "Sent {card} to the GY.",
    "log_move_to_banish": "Banished {card}.",
    "log_move_to_ex": "Returned {card} to the Extra Deck.",
    "log_move_to_mz": "Moved {card} to Monster Zone {index}.",
    "log_move_to_emz": "Moved {card} to Extra Monster Zone {index}.",
    "log_move_to_stz": "Placed {card} in Spell & Trap Zone {index}.",
    "log_activate_spell": "Activated {card} in the Field Zone.",
    "log_sp_summon_to_mz": "Special Summoned {card} to Monster Zone {index}.",
    "log_sp_summon_to_emz": "Special Summoned {card} to Extra Monster Zone {index}.",
    "log_fusion_summon_to_mz": "Fusion Summoned {card} to Monster Zone {index}.",
    "log_fusion_summon_to_emz": "Fusion Summoned {card} to Extra Monster Zone {index}.",
    "log_synchro_summon_to_mz": "Synchro Summoned {card} to Monster Zone {index}.",
    "log_synchro_summon_to_emz": "Synchro Summoned {card} to Extra Monster Zone {index}.",
    "log_xyz_summon_to_mz": "Xyz Summoned {card} to Monster Zone {index}.",
    "log_xyz_summon_to_emz": "Xyz Summoned {card} to Extra Monster Zone {index}.",
    "log_link_summon_to_mz": "Link Summoned {card} to Monster Zone {index}.",
    "log_link_summon_to_emz": "Link Summoned {card} to Extra Monster Zone {index}.",
    "log_materials_detached": "(its materials were sent to the GY)",
    "log_warn_tribute": "(warning: a Level {level} monster needs tributes; the Normal Summon was not used)",
    "log_warn_manual_tribute": "(tribute the required monsters manually)",
    # rule violations
    "log_error_condition": "The conditions for that action are not met.",
    "log_error_zone": "That zone is already occupied.",
    "log_error_zone_occupied": "That Spell & Trap Zone is already occupied.",
    "log_rule_p_zone": "Only Pendulum monsters can be placed in the Spell & Trap Zones.",
    "log_emz_restriction": "You can only use one Extra Monster Zone.",
    "log_error_material": "There are not enough materials.",
    # session
    "log_draw": "Drew a card.",
    "log_deck_shuffled": "Shuffled the Deck.",
    "log_deck_sorted": "Sorted the Deck.",
    "log_end_turn": "Ended the turn. Once-per-turn effects are available again.",
    "log_max_copies_reached": "You cannot run more than 3 copies of {card}.",
    "log_min_copies_reached": "At least one copy of {card} must remain.",
    "log_undo_empty": "Nothing to undo.",
    "log_replay_jump": "Jumped to step {index}.",
    "log_return_from_jump": "Returned to the latest state.",
    "log_sys_already_at_step": "Already at that step.",
    "log_sys_state_not_found": "No saved state matches that step.",
    "log_change_lp": "LP changed by {amount}. Current LP: {lp}.",
    # effects
    "log_activate_effect": "Activated the effect of {card}.",
    "log_trigger_activated": "Activated the triggered effect of {card}.",
    "log_trigger_effect": "The effect of {card} activates.",
    "log_effect_negated": "The effects of {card} are negated.",
    "log_no_effect_defined": "{card} has no effect that can be activated here.",
    "log_hopt_used": "The effect of {card} was already used this turn.",
    "log_effect_already_used": "The effect of {card} was already used this turn.",
    "log_destroy": "Destroyed {card}.",
    "log_banish": "Banished {card}.",
    "log_to_gy": "Sent {card} to the GY.",
    "log_to_deck": "Returned {card} to the Deck.",
    "log_to_extra": "Returned {card} to the Extra Deck.",
    "log_sp_summon": "Special Summoned {card}.",
    "log_place_card": "Placed {card} in the Pendulum Zone.",
    "log_take_damage": "Took {amount} damage.",
    "log_recover_lp": "Gained {amount} LP.",
    "log_search_fail": "There are no valid cards to choose.",
    "log_no_available_zones": "There is no available zone.",
    "log_detach_material": "{card} detached {material}.",
    "log_level_change_amount": "The Level of {card} increased by {amount}.",
    "log_copernicus_dump": "Sent {card} from the Deck to the GY.",
    "log_orthros_destroy": "DD Orthros destroys {card} and {target}.",
    "log_orthros_no_empty_zone": "DD Orthros cannot be Special Summoned: no empty Monster Zone.",
    "log_scale_surveyor_bounced": "Returned {card} to the hand.",
    "log_necro_slime_banish": "Banished {card1} and {card2} as Fusion Materials.",
    "log_fusion_select": "Selected {card} for Fusion Summon.",
    "log_no_fusion_in_ex": "There is no valid Fusion Monster in the Extra Deck.",
    "log_lance_soldier_banish_warn": "DD Lance Soldier will be banished when it leaves the field.",
    "log_defense_soldier_no_targets": "There are no \"DD\" Pendulum monsters to add.",
    "log_zeus_extra_p": "Destroyed {card}. You can Pendulum Summon one more time this turn.",
    "err_count_surveyor_no_zone": "DD Count Surveyor cannot be Special Summoned: no empty Monster Zone.",
    # summons
    "log_summon_materials": "Materials: {materials}.",
    "log_synchro_start": "Synchro Summoning {card}.",
    "log_xyz_no_options": "This Xyz Monster cannot be summoned right now.",
    "log_xyz_summon_success": "Xyz Summoned {card}.",
    "log_special_summon_success_gy": "Special Summoned {card} by sending its materials to the GY.",
    "log_arc_crisis_select_material": "Select material {current} ({requirements}).",
    "log_arc_crisis_req_fail": "The materials must cover Fusion, Synchro, Xyz and Pendulum.",
    "log_gilgamesh_req_fail": "DDD Abyss King Gilgamesh requires 2 \"DD\" monsters.",
    "log_ragnarok_req_fail": "DDD Sky King Zeus Ragnarok requires 2+ \"DD\" monsters (Link Rating 3).",
    "log_link_material_select": "Selected {card} as Link Material.",
    "log_ragnarok_link_start": "Link Summoning with {materials}.",
    "log_pendulum_summoning": "Pendulum Summoning {count} monster(s).",
    "log_pendulum_limit_reached": "You cannot Pendulum Summon again this turn.",
    "log_no_pendulum_monsters": "There are no monsters that can be Pendulum Summoned.",
    "log_no_valid_zones_for_card": "There is no zone where {card} can be Pendulum Summoned.",
    "log_select_tribute": "Select tribute {current} of {required}.",
    "log_tribute_summon": "Tribute Summoned {card}.",
    "log_tribute_error_zone": "There is no zone to Tribute Summon into.",
    # prompts
    "ui_yes": "Yes",
    "ui_no": "No",
    "ui_cancel": "Cancel",
    "ui_search_deck": "Search the Deck",
    "ui_xyz_summon_rank": "Xyz Summon with 2 Level {rank} monsters",
    "ui_xyz_overlay_ddd": "Overlay onto a \"DDD\" monster",
    "ui_xyz_rank_up": "Overlay onto a Rank 4 \"DD\" Xyz Monster",
    "ui_special_summon_4_mats": "Special Summon with 4 materials",
    "label_fusion_synchro_xyz_p": "Fusion, Synchro, Xyz, Pendulum",
    "prompt_chain_order": "Choose which effect to resolve first",
    "prompt_activate_effect": "Activate the effect of {card}?",
    "prompt_select_card": "Select a card",
    "prompt_select_material": "Select a material",
    "prompt_select_zone": "Select a zone",
    "prompt_select_zone_for_card": "Select a zone for {card}",
    "prompt_select_xyz_type": "Select how to Xyz Summon",
    "prompt_select_link_material": "Select Link Material (rating {current}/{max})",
    "prompt_gilgamesh_count_as_2": "Treat DDD Abyss King Gilgamesh as 2 materials?",
    "prompt_tribute_summon": "Tribute Summon {card}?",
    "prompt_destroy_card": "Destroy a card?",
    "prompt_arc_crisis_place": "Place DDDD Dimensional King Arc Crisis in the Pendulum Zone?",
    "prompt_kepler_select_effect": "DD Savant Kepler: choose an effect",
    "prompt_contract_search": "Add a \"Dark Contract\" card from the Deck to the hand",
    "prompt_kepler_return": "Return another \"DD\" card you control to the hand",
    "prompt_copernicus_dump": "DD Savant Copernicus: send a \"DD\" or \"Dark Contract\" card from the Deck to the GY?",
    "prompt_thomas_p_return": "DD Savant Thomas: add a face-up \"DD\" Pendulum Monster from the Extra Deck to the hand?",
    "prompt_thomas_ss_lv8": "DD Savant Thomas: destroy a \"DD\" card in the Pendulum Zone and Special Summon a Level 8 \"DDD\" monster?",
    "prompt_orthros_p_destroy": "DD Orthros: destroy a \"DD\" or \"Dark Contract\" card and a Spell/Trap?",
    "prompt_orthros_hand_ss": "DD Orthros: Special Summon this card from the hand?",
    "prompt_count_surveyor_hand_ss": "DD Count Surveyor: discard a \"DD\" card and Special Summon this card?",
    "prompt_count_surveyor_search_0": "DD Count Surveyor: add a \"DD\" monster with 0 ATK or DEF from the Deck to the hand?",
    "prompt_gryphon_hand_ss": "DD Gryphon: Special Summon this card from the hand?",
    "prompt_gryphon_p_atk_up": "DD Gryphon: give a \"DD\" monster 2000 ATK?",
    "prompt_gryphon_draw": "DD Gryphon: discard a \"DD\" or \"Dark Contract\" card and draw 1 card?",
    "prompt_scale_surveyor_ss": "DD Scale Surveyor: Special Summon this card from the hand?",
    "prompt_scale_surveyor_level_change": "DD Scale Surveyor: make this card's Level 4?",
    "prompt_scale_surveyor_bounce": "DD Scale Surveyor: return a \"DD\" Pendulum card you control to the hand?",
    "prompt_necro_slime_fusion": "DD Necro Slime: Fusion Summon a \"DDD\" Fusion Monster?",
    "prompt_lance_soldier_level": "DD Lance Soldier: increase the Level of a \"DD\" monster?",
    "prompt_lance_gy": "DD Lance Soldier: destroy a \"Dark Contract\" card and Special Summon this card?",
    "prompt_defense_soldier_activate": "DD Defense Soldier: choose an effect",
    "prompt_defense_soldier_ss": "Special Summon a \"DD\" Pendulum Monster from the Pendulum Zone",
    "prompt_defense_soldier_search": "Banish this card and add a \"DD\" Pendulum Monster",
    "prompt_genghis_gy_ss": "{card}: Special Summon a \"DD\" monster from the GY?",
    "prompt_ragnarok_gy_ss": "{card}: Special Summon a \"DDD\" monster from the GY?",
    "prompt_ragnarok_p_ss": "DDD Oblivion King Abyss Ragnarok: Special Summon a \"DD\" monster from the GY?",
    "prompt_gilgamesh_p_place": "DDD Abyss King Gilgamesh: place 2 \"DD\" Pendulum Monsters in the Pendulum Zones?",
    "prompt_tell_send_gy": "DDD Marksman King Tell: send a \"DD\" or \"Dark Contract\" card from the Deck to the GY?",
    "prompt_tell_detach": "DDD Marksman King Tell: detach a material?",
    "prompt_caesar_add_contract": "Add a \"Dark Contract\" card from the Deck to the hand?",
    "prompt_solomon_search": "DDD Wise King Solomon: detach a material and add a \"DD\" card from the Deck to the hand?",
    "prompt_clovis_ss": "DDD First King Clovis: Special Summon a \"DD\" monster?",
    "prompt_alfred_fusion": "DDD Alfred the Divine Sage King: Fusion Summon a \"DDD\" Fusion Monster?",
    "prompt_alfred_recover_contract": "DDD Alfred the Divine Sage King: place a \"Dark Contract\" card in the Spell & Trap Zone?",
    "prompt_zeus_extra_p": "DDD Sky King Zeus Ragnarok: destroy a card and Pendulum Summon once more?",
    "prompt_machinex_p_place": "DDD Zero Doom Queen Machinex: place a Continuous \"Dark Contract\" card from the Deck?",
    "prompt_machinex_destruction_p": "DDD Zero Doom Queen Machinex: place this card in the Pendulum Zone?",
    "prompt_zero_machinex_ss": "DDD Zero Doom Queen Machinex: Special Summon this card from the Extra Deck?",
    "prompt_gate_search": "Dark Contract with the Gate: add a \"DD\" monster from the Deck to the hand?",
    "prompt_swamp_king_fusion": "Dark Contract with the Swamp King: Fusion Summon a \"DD\" Fusion Monster?",
    "prompt_witch_destroy": "Dark Contract with the Witch: discard a card and destroy a card on the field?",
    "prompt_zero_king_destroy": "Dark Contract with the Zero King: destroy a \"DD\" card and Special Summon a \"DD\" monster from the Deck?",
    "prompt_level_amount": "Increase the Level by {amount}",
    # selection titles
    "prompt_select_dd_ss": "Select a \"DD\" monster.",
    "prompt_select_lv8_ddd": "Select a \"DDD\" monster.",
    "prompt_select_0_dd": "Select a \"DD\" monster with 0 ATK or DEF.",
    "prompt_discard_dd_hand": "Select a \"DD\" card in your hand to discard.",
    "prompt_discard_card": "Select a card to discard.",
    "prompt_gryphon_gy_return": "DD Gryphon: add a \"DD\" card from the Deck to the hand?",
    "prompt_select_zone_synchro": "Select a zone for the Synchro Monster.",
    "prompt_select_zone_xyz": "Select a zone for the Xyz Monster.",
    "prompt_select_zone_fusion": "Select a zone for the Fusion Monster.",
    "prompt_select_zone_machinex": "Select a zone for DDD Zero Doom Queen Machinex.",
    "prompt_select_zone_tell": "Select a zone for DDD Marksman King Tell.",
    "prompt_select_zone_arc_crisis": "Select a zone for DDDD Dimensional King Arc Crisis.",
    "prompt_select_zone_tribute": "Select a zone for the Tribute Summon.",
    "prompt_select_zone_ss": "Select a zone to Special Summon to.",
    "label_contract_search_deck": "Add a \"Dark Contract\" card from the Deck",
    "label_dd_return_field": "Return a \"DD\" monster you control to the hand",
    "label_fusion_monster_select": "Select a Fusion Monster.",
    "label_ss_pzone": "Special Summon a \"DD\" monster from your Pendulum Zone",
    "label_gy_add_p": "Banish this card and add a \"DD\" Pendulum Monster to the hand",
}


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def format_log(key: str, **params) -> str:
    template = LOG_TEMPLATES.get(key)
    if template is None:
        return key
    return template.format_map(_KeepMissing({k: str(v) for k, v in params.items()}))
