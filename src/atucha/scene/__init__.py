from atucha.scene.frame import build_scene_frame

__all__ = ["build_scene_frame"]
