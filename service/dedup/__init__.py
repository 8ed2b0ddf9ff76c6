from service.dedup.encounter_summary import ActorSummary, EncounterSummary, PersistedEncounter
from service.dedup.fingerprint import compute_fingerprint, compute_player_set_hash
from service.dedup.fuzzy_matcher import FuzzySimilarity, compute_similarity, is_fuzzy_duplicate
from service.dedup.pipeline import DedupPipeline, IngestOutcome
from service.dedup.upload_service import UploadService, UploadResult

__all__ = [
    "ActorSummary", "EncounterSummary", "PersistedEncounter",
    "compute_fingerprint", "compute_player_set_hash",
    "FuzzySimilarity", "compute_similarity", "is_fuzzy_duplicate",
    "DedupPipeline", "IngestOutcome",
    "UploadService", "UploadResult",
]
