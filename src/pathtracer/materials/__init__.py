"""Materials module: surface scattering models and textures.

Components:
    diffuse: Hemisphere scattering with a constant color or a texture
    reflective: Perfect mirror
    refractive: Fresnel-weighted reflection plus a forked transmitted path
    emissive: Light sources that keep bouncing after contributing
    texture: Texture registry, Pillow decoding and wrapped lookups

Each material type keeps its parameters in its own Taichi field registry;
the scene manager maps unified material IDs onto (type, index) pairs.
Importing this package declares Taichi fields, so call ti.init() first.
"""

from .diffuse import (
    NO_TEXTURE,
    add_diffuse_material,
    clear_diffuse_materials,
    get_diffuse_albedo,
    get_diffuse_color,
    get_diffuse_material_count,
    scatter_diffuse,
)
from .emissive import (
    add_emissive_material,
    clear_emissive_materials,
    get_emissive_emission,
    get_emissive_intensity,
    get_emissive_material_count,
    scatter_emissive,
)
from .reflective import (
    add_reflective_material,
    clear_reflective_materials,
    get_reflective_material_count,
    scatter_reflective,
)
from .refractive import (
    add_refractive_material,
    clear_refractive_materials,
    get_refractive_index,
    get_refractive_material_count,
    scatter_refractive,
)
from .texture import (
    TextureLoadError,
    add_texture,
    clear_textures,
    get_texture_count,
    get_texture_size,
    load_texture,
    make_checkerboard,
    sample_texture,
    wrap_coord,
)

__all__ = [
    # Diffuse
    "NO_TEXTURE",
    "scatter_diffuse",
    "add_diffuse_material",
    "clear_diffuse_materials",
    "get_diffuse_material_count",
    "get_diffuse_albedo",
    "get_diffuse_color",
    # Reflective
    "scatter_reflective",
    "add_reflective_material",
    "clear_reflective_materials",
    "get_reflective_material_count",
    # Refractive
    "scatter_refractive",
    "add_refractive_material",
    "clear_refractive_materials",
    "get_refractive_material_count",
    "get_refractive_index",
    # Emissive
    "scatter_emissive",
    "add_emissive_material",
    "clear_emissive_materials",
    "get_emissive_material_count",
    "get_emissive_emission",
    "get_emissive_intensity",
    # Textures
    "TextureLoadError",
    "add_texture",
    "load_texture",
    "clear_textures",
    "get_texture_count",
    "get_texture_size",
    "make_checkerboard",
    "sample_texture",
    "wrap_coord",
]
