"""Avatar asset bundles: where the renderer finds the assets for a fidelity tier."""
from __future__ import annotations

from dataclasses import dataclass, field

from src.fidelity.models import AvatarFidelityTier

EMOTION_MAPPINGS = {
    "happy": "smile",
    "sad": "frown",
    "surprised": "wideeyes",
    "neutral": "idle",
}


@dataclass(frozen=True)
class AvatarAssetBundle:
    """Asset locations for one avatar at one fidelity tier."""
    avatar_id: str
    fidelity: AvatarFidelityTier
    model_url: str | None
    texture_url: str | None
    animation_set: str | None
    emotion_mappings: dict[str, str] = field(default_factory=lambda: dict(EMOTION_MAPPINGS))

    @property
    def is_text_only(self) -> bool:
        return self.fidelity is AvatarFidelityTier.TEXT_ONLY

    def to_dict(self) -> dict:
        return {
            "id": self.avatar_id,
            "fidelity": self.fidelity.value,
            "modelUrl": self.model_url,
            "textureUrl": self.texture_url,
            "animationSet": self.animation_set,
            "emotionMappings": dict(self.emotion_mappings),
        }


def avatar_asset_bundle(
    avatar_id: str,
    fidelity: AvatarFidelityTier,
    base_path: str = "/assets/avatars",
) -> AvatarAssetBundle:
    """
    Build the asset bundle for an avatar.

    Text-only avatars have no graphical assets, only the emotion mapping
    (used to pick descriptive text).
    """
    if fidelity is AvatarFidelityTier.TEXT_ONLY:
        return AvatarAssetBundle(avatar_id, fidelity, None, None, None)

    root = f"{base_path.rstrip('/')}/{avatar_id}/{fidelity.value}"
    return AvatarAssetBundle(
        avatar_id=avatar_id,
        fidelity=fidelity,
        model_url=f"{root}/model.json",
        texture_url=f"{root}/texture.png",
        animation_set=f"{root}/animations.json",
    )
