from models.users import User
from models.encounter import Encounter
from models.attempt import Attempt
from models.encounter_phase import EncounterPhase, PhaseType, PhaseOutcome
from models.death_event import DeathEvent
from models.actor_encounter_stat import ActorEncounterStat
from models.damage_skill_stat import DamageSkillStat
from models.heal_skill_stat import HealSkillStat
from models.encounter_boss import EncounterBoss
from models.entity import Entity
from models.detailed_player_data import DetailedPlayerData
from models.module import Module, ModuleSource
from models.module_part import ModulePart
from models.optimization_result import OptimizationResult

__all__ = [
    "User",
    "Encounter", "Attempt", "EncounterPhase", "PhaseType", "PhaseOutcome",
    "DeathEvent", "ActorEncounterStat", "DamageSkillStat", "HealSkillStat",
    "EncounterBoss", "Entity", "DetailedPlayerData",
    "Module", "ModuleSource", "ModulePart",
    "OptimizationResult",
]
