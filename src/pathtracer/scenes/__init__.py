"""Built-in scenes, selectable by name from the command line."""
from typing import Callable, Dict, Optional

from pathtracer.config import SceneConfig
from pathtracer.errors import SceneError
from pathtracer.scenes.basic import single_sphere, three_spheres
from pathtracer.scenes.rtiow import final_scene

BUILTIN_SCENES: Dict[str, Callable[[Optional[int]], SceneConfig]] = {
    "rtiow_final": final_scene,
    "three_spheres": three_spheres,
    "single_sphere": single_sphere,
}


def load_builtin(name: str, seed: Optional[int] = None) -> SceneConfig:
    try:
        factory = BUILTIN_SCENES[name]
    except KeyError:
        raise SceneError(f"unknown scene {name!r}, choose from {sorted(BUILTIN_SCENES)}") from None
    return factory(seed)
