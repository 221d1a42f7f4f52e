"""Forking Monte Carlo path tracer built on Taichi.

Renders scenes of spheres, planes and triangle meshes with diffuse,
reflective, refractive and emissive materials into 8-bit RGBA images.

Modules that declare Taichi fields must be imported after ``ti.init()``.
"""

__version__ = "0.1.0"
