"""
Tests for common modules

Tests cover:
- Base mesh construction (tetrahedron, cube)
- Transform immutability and matrices
- Materials and the UV debug texture
- Asset registry handles
- Argument validation
- Config round-trip
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from common.config import Config, FractalKind, SceneMetadata
from common.fractal import FractalParameterError, validate_generation_args
from common.materials import Material, uv_debug_texture, DEBUG_PALETTE
from common.mesh_ops import BaseMesh, build_tetrahedron, build_cube, compute_mesh_stats, planar_uvs
from common.registry import AssetRegistry, MeshHandle
from common.transform import Transform


# ============== Fixtures ==============

@pytest.fixture
def tetrahedron():
    return build_tetrahedron()


@pytest.fixture
def registry():
    return AssetRegistry()


# ============== Base Mesh Tests ==============

class TestBuildTetrahedron:
    """Test the shared tetrahedron mesh."""

    def test_counts(self, tetrahedron):
        """Exactly 4 vertices, 4 triangles, 12 indices."""
        assert tetrahedron.n_vertices == 4
        assert tetrahedron.n_triangles == 4
        assert len(tetrahedron.indices) == 12

    def test_deterministic(self):
        """Two builds should be bit-identical."""
        a = build_tetrahedron()
        b = build_tetrahedron()

        np.testing.assert_array_equal(a.vertices, b.vertices)
        np.testing.assert_array_equal(a.indices, b.indices)

    def test_indices_in_bounds(self, tetrahedron):
        """Every index refers to an existing vertex."""
        assert tetrahedron.indices.max() < tetrahedron.n_vertices
        assert tetrahedron.indices.min() >= 0

    def test_all_vertices_distinct(self, tetrahedron):
        """All four corners are kept, not collapsed into one."""
        assert len(np.unique(tetrahedron.vertices, axis=0)) == 4

    def test_unit_edges(self, tetrahedron):
        """Regular tetrahedron with edge length 1."""
        v = tetrahedron.vertices
        for i in range(4):
            for j in range(i + 1, 4):
                assert abs(np.linalg.norm(v[i] - v[j]) - 1.0) < 1e-12

    def test_each_face_once(self, tetrahedron):
        """Every vertex triple appears as exactly one face."""
        faces = {tuple(sorted(f)) for f in tetrahedron.faces.tolist()}
        assert faces == {(0, 1, 2), (0, 1, 3), (0, 2, 3), (1, 2, 3)}

    def test_outward_winding(self, tetrahedron):
        """Normals point away from the centroid."""
        v = tetrahedron.vertices
        center = v.mean(axis=0)
        for face in tetrahedron.faces:
            a, b, c = v[face]
            normal = np.cross(b - a, c - a)
            assert np.dot(normal, (a + b + c) / 3.0 - center) > 0

    def test_closed_solid(self, tetrahedron):
        """Watertight, consistently wound, positive volume."""
        stats = compute_mesh_stats(tetrahedron)

        assert stats["is_watertight"]
        assert stats["is_winding_consistent"]
        assert stats["volume"] == pytest.approx(1.0 / (6.0 * np.sqrt(2.0)))


class TestBuildCube:
    """Test the unit cube mesh."""

    def test_cube_shape(self):
        """8 vertices, 12 triangles, unit extents."""
        cube = build_cube()
        stats = compute_mesh_stats(cube)

        assert cube.n_vertices == 8
        assert cube.n_triangles == 12
        np.testing.assert_allclose(stats["extents"], [1.0, 1.0, 1.0])
        assert stats["volume"] == pytest.approx(1.0)

    def test_uvs_in_unit_square(self):
        """Planar UVs cover [0, 1]."""
        cube = build_cube(2.0)
        assert cube.uvs.shape == (8, 2)
        assert cube.uvs.min() == pytest.approx(0.0)
        assert cube.uvs.max() == pytest.approx(1.0)


class TestBaseMeshValidation:
    """Test malformed mesh rejection."""

    def test_out_of_range_index(self):
        """Index >= vertex count is rejected."""
        with pytest.raises(ValueError):
            BaseMesh(name="bad", vertices=np.zeros((3, 3)), faces=[[0, 1, 3]])

    def test_wrong_vertex_shape(self):
        """Vertices must be Nx3."""
        with pytest.raises(ValueError):
            BaseMesh(name="bad", vertices=np.zeros((3, 2)), faces=[[0, 1, 2]])

    def test_wrong_uv_shape(self):
        """UVs must match vertex count."""
        with pytest.raises(ValueError):
            BaseMesh(name="bad", vertices=np.zeros((3, 3)), faces=[[0, 1, 2]], uvs=np.zeros((2, 2)))

    def test_planar_uvs_flat_axis(self):
        """Degenerate extent does not divide by zero."""
        uvs = planar_uvs(np.array([[0.0, 0.0, 0.0], [1.0, 5.0, 0.0]]))
        assert np.all(np.isfinite(uvs))


# ============== Transform Tests ==============

class TestTransform:
    """Test placement records."""

    def test_scalar_scale_broadcast(self):
        """Scalar scale becomes a uniform 3-vector."""
        t = Transform(translation=[1, 2, 3], scale=0.5)
        np.testing.assert_array_equal(t.scale, [0.5, 0.5, 0.5])
        assert t.uniform_scale == 0.5

    def test_non_uniform_scale(self):
        """uniform_scale is None when components differ."""
        t = Transform(translation=[0, 0, 0], scale=[1, 2, 3])
        assert t.uniform_scale is None

    def test_immutable(self):
        """Fields and arrays cannot be modified."""
        t = Transform(translation=[0, 0, 0], scale=1.0)

        with pytest.raises(AttributeError):
            t.translation = np.ones(3)
        with pytest.raises(ValueError):
            t.translation[0] = 5.0

    def test_value_equality_unhashable(self):
        """Equal by value, but not usable as a dict key."""
        a = Transform(translation=[1, 2, 3], scale=0.5)
        b = Transform(translation=[1, 2, 3], scale=0.5)

        assert a == b
        with pytest.raises(TypeError):
            hash(a)

    def test_source_array_not_frozen(self):
        """The caller's array stays writable."""
        pos = np.zeros(3)
        Transform(translation=pos, scale=1.0)
        pos[0] = 1.0

    def test_matrix(self):
        """Matrix applies scale then translation."""
        t = Transform(translation=[1, 2, 3], scale=2.0)
        m = t.to_matrix()

        point = m @ np.array([1.0, 1.0, 1.0, 1.0])
        np.testing.assert_allclose(point[:3], [3.0, 4.0, 5.0])

    def test_equality(self):
        """Equal when all components match."""
        assert Transform([1, 2, 3], 0.5) == Transform(np.array([1.0, 2.0, 3.0]), [0.5, 0.5, 0.5])
        assert Transform([1, 2, 3], 0.5) != Transform([1, 2, 3], 0.25)

    def test_bad_shape(self):
        """Translation must have 3 components."""
        with pytest.raises(ValueError):
            Transform(translation=[1, 2], scale=1.0)


# ============== Material Tests ==============

class TestUVDebugTexture:
    """Test debug texture synthesis."""

    def test_shape_and_dtype(self):
        """8x8 RGBA bytes by default."""
        tex = uv_debug_texture()
        assert tex.shape == (8, 8, 4)
        assert tex.dtype == np.uint8

    def test_first_row_is_palette(self):
        """Row 0 is the unrotated palette."""
        tex = uv_debug_texture()
        np.testing.assert_array_equal(tex[0].reshape(-1), DEBUG_PALETTE)

    def test_rows_rotate_right(self):
        """Each row is the previous row shifted one pixel right."""
        tex = uv_debug_texture()
        for y in range(1, 8):
            np.testing.assert_array_equal(tex[y], np.roll(tex[y - 1], 1, axis=0))

    def test_invalid_size(self):
        """Non-positive size is rejected."""
        with pytest.raises(ValueError):
            uv_debug_texture(0)


class TestMaterial:
    """Test material descriptions."""

    def test_plain_material(self):
        """Color-only material converts without texture."""
        pbr = Material(name="plain", base_color=(0.8, 0.7, 0.6, 1.0)).to_trimesh()
        assert pbr.baseColorTexture is None
        assert pbr.alphaMode == "OPAQUE"

    def test_debug_material_has_texture(self):
        """Debug material carries the 8x8 image."""
        pbr = Material.debug().to_trimesh()
        assert pbr.baseColorTexture is not None
        assert pbr.baseColorTexture.size == (8, 8)

    def test_bad_color(self):
        """Color must have 4 channels."""
        with pytest.raises(ValueError):
            Material(name="bad", base_color=(1.0, 1.0, 1.0))


# ============== Registry Tests ==============

class TestAssetRegistry:
    """Test handle issuing and lookup."""

    def test_handles_are_distinct(self, registry, tetrahedron):
        """Each registration gets its own handle."""
        a = registry.add_mesh(tetrahedron)
        b = registry.add_mesh(build_cube())
        m = registry.add_material(Material(name="m"))

        assert a != b
        assert len({a.id, b.id, m.id}) == 3
        assert registry.mesh(a) is tetrahedron
        assert registry.material(m).name == "m"

    def test_registered_mesh_read_only(self, registry, tetrahedron):
        """Registered meshes cannot be modified in place."""
        registry.add_mesh(tetrahedron)
        with pytest.raises(ValueError):
            tetrahedron.vertices[0, 0] = 10.0

    def test_unknown_handle(self, registry):
        """Lookups of foreign handles fail."""
        with pytest.raises(KeyError):
            registry.mesh(MeshHandle(99, "missing"))


# ============== Validation Tests ==============

class TestValidateGenerationArgs:
    """Test reject-and-log argument checking."""

    def test_valid(self):
        """Valid input returns a float position."""
        pos = validate_generation_args((0, 1, 2), 1.0, 3, max_depth=4)
        assert pos.dtype == float
        np.testing.assert_array_equal(pos, [0.0, 1.0, 2.0])

    def test_depth_zero_is_valid(self):
        """Depth 0 is the base case, not an error."""
        validate_generation_args((0, 0, 0), 1.0, 0, max_depth=4)

    @pytest.mark.parametrize("depth", [-1, 5, 2.0, True, "3"])
    def test_bad_depth(self, depth):
        """Negative, too deep or non-integer depths are rejected."""
        with pytest.raises(FractalParameterError):
            validate_generation_args((0, 0, 0), 1.0, depth, max_depth=4)

    @pytest.mark.parametrize("scale", [0.0, -1.0, float("inf"), float("nan"), "big"])
    def test_bad_scale(self, scale):
        """Non-positive or non-finite scales are rejected."""
        with pytest.raises(FractalParameterError):
            validate_generation_args((0, 0, 0), scale, 1, max_depth=4)

    @pytest.mark.parametrize("position", [(0, 0), (0, 0, float("nan")), "abc"])
    def test_bad_position(self, position):
        """Positions must be finite 3-vectors."""
        with pytest.raises(FractalParameterError):
            validate_generation_args(position, 1.0, 1, max_depth=4)

    def test_rejection_is_logged(self, caplog):
        """Rejections are logged at ERROR level."""
        with pytest.raises(FractalParameterError):
            validate_generation_args((0, 0, 0), 1.0, -2, max_depth=4)
        assert any(r.levelname == "ERROR" for r in caplog.records)

    def test_is_value_error(self):
        """Callers can catch ValueError."""
        assert issubclass(FractalParameterError, ValueError)


# ============== Config Tests ==============

class TestConfig:
    """Test configuration dataclass."""

    def test_default_values(self):
        """Defaults match the documented driver seed."""
        config = Config()

        assert config.fractal is FractalKind.MENGER
        assert config.depth == 4
        assert config.initial_scale == 1.0
        assert config.origin == (0.0, 0.0, 0.0)
        assert config.max_depth_for(FractalKind.MENGER) >= config.depth
        assert config.max_depth_for(FractalKind.SIERPINSKI) >= config.depth

    def test_json_round_trip(self, tmp_path):
        """save/from_json preserves all fields."""
        config = Config(
            fractal=FractalKind.SIERPINSKI,
            depth=2,
            origin=(1.0, 2.0, 3.0),
            use_debug_texture=True,
            output_dir=tmp_path / "out"
        )
        path = tmp_path / "config.json"
        config.save(path)

        loaded = Config.from_json(path)
        assert loaded == config

    def test_unknown_fractal(self, tmp_path):
        """Unknown fractal names fail on load."""
        path = tmp_path / "config.json"
        path.write_text('{"fractal": "koch"}')
        with pytest.raises(ValueError):
            Config.from_json(path)

    def test_output_path(self):
        """Output path encodes option letter and name."""
        config = Config(output_dir=Path("outputs"))
        assert config.get_output_path(FractalKind.SIERPINSKI) == Path("outputs/option_S_sierpinski/scenes")

    def test_metadata_round_trip(self, tmp_path):
        """SceneMetadata survives save and reload."""
        meta = SceneMetadata(
            fractal="menger", depth=1, initial_scale=1.0, n_instances=20,
            n_placeholders=1, base_mesh_vertices=8, base_mesh_triangles=12,
            origin=(0.0, 0.0, 0.0), generation_params={"max_depth": 4}
        )
        path = tmp_path / "meta.json"
        meta.save(path)

        import json
        loaded = SceneMetadata.from_dict(json.loads(path.read_text()))
        assert loaded == meta
