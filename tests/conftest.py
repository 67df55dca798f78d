"""Pytest configuration for pinray tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear primitives, materials and lights before and after each test."""
    # Import here so Taichi is initialized before any field is declared
    from pinray.materials.matte import clear_matte_materials
    from pinray.materials.reflective import clear_reflective_materials
    from pinray.materials.transparent import clear_transparent_materials
    from pinray.scene.intersection import clear_scene
    from pinray.scene.lights import clear_lights
    from pinray.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_matte_materials()
        clear_reflective_materials()
        clear_transparent_materials()
        clear_lights()
        _clear_material_tracking()

    _clear_all()
    yield
    _clear_all()
