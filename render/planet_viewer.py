#!/usr/bin/env python3
"""
Real-time planet viewer using Raylib.

Displays the generated planet with a water sphere and an atmosphere shell,
and exposes every generation parameter as a keyboard slider.
Uses pure Python with pyray bindings (no CMake required).
"""

import argparse
import math
import os
import random
import sys
import time

import numpy as np

try:
    import pyray as rl
    RAYLIB_AVAILABLE = True
except ImportError:
    RAYLIB_AVAILABLE = False
    print("Warning: pyray not available. Install with: pip install raylib")

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.engine import PlanetAnalyzer, PlanetMeshBuilder, icosphere, uv_sphere
from src.procgen import NoiseField, PreconditionViolation, TerrainSynthesizer
from src.scene import SHELL_RADIUS, PlanetScene


PLANET_VS = """
#version 330
in vec3 vertexPosition;
in vec3 vertexNormal;
in vec4 vertexColor;

uniform mat4 mvp;
uniform mat4 matModel;
uniform mat4 matNormal;
uniform vec3 lightPosition;

out vec3 fragNormal;
out vec4 fragColor;
out vec3 fragLightDir;

void main() {
    vec3 worldPos = vec3(matModel * vec4(vertexPosition, 1.0));
    fragNormal = normalize(vec3(matNormal * vec4(vertexNormal, 0.0)));
    fragLightDir = normalize(lightPosition - worldPos);
    fragColor = vertexColor;
    gl_Position = mvp * vec4(vertexPosition, 1.0);
}
"""

PLANET_FS = """
#version 330
in vec3 fragNormal;
in vec4 fragColor;
in vec3 fragLightDir;

out vec4 finalColor;

void main() {
    float intensity = max(dot(normalize(fragNormal), fragLightDir), 0.0);
    finalColor = vec4(fragColor.rgb * (0.25 + 0.75 * intensity), 1.0);
}
"""

ATMOSPHERE_VS = """
#version 330
in vec3 vertexPosition;
in vec3 vertexNormal;

uniform mat4 mvp;
uniform mat4 matModel;
uniform mat4 matView;
uniform mat4 matNormal;
uniform vec3 lightPosition;

out vec3 fragNormal;
out vec3 fragViewPos;
out vec3 fragLightDir;

void main() {
    vec4 worldPos = matModel * vec4(vertexPosition, 1.0);
    fragNormal = normalize(vec3(matNormal * vec4(vertexNormal, 0.0)));
    fragViewPos = vec3(matView * worldPos);
    fragLightDir = normalize(lightPosition - worldPos.xyz);
    gl_Position = mvp * vec4(vertexPosition, 1.0);
}
"""

# starColor and oxygen are bound but never enter the color mix
ATMOSPHERE_FS = """
#version 330
uniform vec3 starColor;
uniform float carbon;
uniform float oxygen;
uniform float thirdGas;
uniform vec3 thirdGasColor;
uniform float fogThickness;

in vec3 fragNormal;
in vec3 fragViewPos;
in vec3 fragLightDir;

out vec4 finalColor;

void main() {
    vec3 oxygenColor = vec3(0.0, 0.5, 1.0);
    vec3 carbonColor = vec3(1.0, 0.3, 0.3);

    vec3 baseColor = mix(oxygenColor, carbonColor, carbon);
    baseColor = mix(baseColor, thirdGasColor, thirdGas);

    float intensity = max(dot(normalize(fragNormal), fragLightDir), 0.0);
    vec3 color = baseColor * intensity;

    float distance = length(fragViewPos);
    float alpha = smoothstep(1.0 - 0.5 * fogThickness, 1.0 + 0.5 * fogThickness, distance);
    finalColor = vec4(color, alpha);
}
"""


class PlanetViewer:
    """
    Real-time 3D planet viewer.

    Features:
    - Keyboard sliders for every control (UP/DOWN select, LEFT/RIGHT adjust)
    - Mouse wheel zoom
    - Rotating planet and atmosphere shell
    - Star type, atmosphere visibility and wireframe toggles
    """

    def __init__(
        self,
        scene: PlanetScene,
        window_width: int = 1024,
        window_height: int = 768
    ):
        if not RAYLIB_AVAILABLE:
            raise ImportError("pyray is required. Install with: pip install raylib")

        self.scene = scene
        self.window_width = window_width
        self.window_height = window_height
        self.analyzer = PlanetAnalyzer()

        self.controls = [name for name, _ in scene.registry.list_controls()]
        self.selected = 0
        self.wireframe_mode = False

        self.planet_model = None
        self.water_model = None
        self.atmosphere_model = None
        self.analysis = None
        self.last_generation_time = 0.0

        scene.subscribe(self._on_scene_event)

    def initialize(self):
        """Open the window and upload the initial scene."""

        rl.set_config_flags(rl.FLAG_WINDOW_RESIZABLE | rl.FLAG_MSAA_4X_HINT)
        rl.init_window(self.window_width, self.window_height, "Planet Viewer")
        rl.set_target_fps(60)

        self.camera = rl.Camera3D(
            rl.Vector3(0.0, 0.0, 5.0),
            rl.Vector3(0.0, 0.0, 0.0),
            rl.Vector3(0.0, 1.0, 0.0),
            75.0,
            rl.CAMERA_PERSPECTIVE
        )

        self.planet_shader = rl.load_shader_from_memory(PLANET_VS, PLANET_FS)
        self.atmosphere_shader = rl.load_shader_from_memory(ATMOSPHERE_VS, ATMOSPHERE_FS)

        light = rl.ffi.new("float[3]", list(self.scene.settings.light_position))
        for shader in (self.planet_shader, self.atmosphere_shader):
            loc = rl.get_shader_location(shader, "lightPosition")
            rl.set_shader_value(shader, loc, light, rl.SHADER_UNIFORM_VEC3)

        self.water_model = rl.load_model_from_mesh(rl.gen_mesh_sphere(1.0, 64, 64))
        self.atmosphere_model = rl.load_model_from_mesh(rl.gen_mesh_sphere(SHELL_RADIUS, 64, 64))
        self.atmosphere_model.materials[0].shader = self.atmosphere_shader

        self._upload_planet()
        self._upload_atmosphere_uniforms()

        print("Planet viewer initialized!")
        print("Controls:")
        print("  UP/DOWN - Select parameter")
        print("  LEFT/RIGHT - Adjust parameter")
        print("  Mouse wheel - Zoom")
        print("  G/K/M - Star type")
        print("  V - Toggle atmosphere")
        print("  SPACE - New noise seed")
        print("  T - Toggle wireframe")
        print("  ESC - Exit")

    def _on_scene_event(self, event: str):
        if self.planet_model is None:
            return
        if event == "rebuild":
            self._upload_planet()
        elif event == "atmosphere":
            self._upload_atmosphere_uniforms()

    def _copy_to_raylib(self, array: np.ndarray, ctype: str):
        """Copy an array into raylib-owned memory (freed with the model)."""

        array = np.ascontiguousarray(array)
        ptr = rl.ffi.cast(ctype, rl.mem_alloc(array.nbytes))
        rl.ffi.memmove(ptr, array, array.nbytes)
        return ptr

    def _upload_planet(self):
        """Convert the scene's mesh to a Raylib model."""

        start_time = time.time()
        mesh = self.scene.mesh

        if mesh.vertex_count > 65535:
            raise ValueError(f"Raylib meshes use 16-bit indices; {mesh.vertex_count} vertices is too many")

        rl_mesh = rl.ffi.new("Mesh *")
        rl_mesh.vertexCount = mesh.vertex_count
        rl_mesh.triangleCount = mesh.triangle_count
        rl_mesh.vertices = self._copy_to_raylib(mesh.positions.astype(np.float32), "float *")
        rl_mesh.normals = self._copy_to_raylib(mesh.normals.astype(np.float32), "float *")
        rl_mesh.colors = self._copy_to_raylib(mesh.colors_rgba8(), "unsigned char *")
        rl_mesh.indices = self._copy_to_raylib(mesh.indices.astype(np.uint16), "unsigned short *")

        # Upload mesh to GPU
        rl.upload_mesh(rl_mesh, False)

        model = rl.load_model_from_mesh(rl_mesh[0])
        model.materials[0].shader = self.planet_shader

        # Clean up previous model
        if self.planet_model is not None:
            rl.unload_model(self.planet_model)

        self.planet_model = model
        self.analysis = self.analyzer.analyze(mesh)
        self.last_generation_time = time.time() - start_time

    def _upload_atmosphere_uniforms(self):
        uniforms = self.scene.uniforms
        shader = self.atmosphere_shader

        def set_float(name, value):
            rl.set_shader_value(shader, rl.get_shader_location(shader, name),
                                rl.ffi.new("float *", value), rl.SHADER_UNIFORM_FLOAT)

        def set_vec3(name, value):
            rl.set_shader_value(shader, rl.get_shader_location(shader, name),
                                rl.ffi.new("float[3]", list(value)), rl.SHADER_UNIFORM_VEC3)

        set_float("carbon", uniforms.carbon)
        set_float("oxygen", uniforms.oxygen)
        set_float("thirdGas", uniforms.third_gas_fraction)
        set_float("fogThickness", uniforms.fog_thickness)
        set_vec3("thirdGasColor", uniforms.third_gas_color)
        set_vec3("starColor", uniforms.star_color)

    def handle_input(self):
        """Handle user input."""

        if rl.is_key_pressed(rl.KEY_DOWN):
            self.selected = (self.selected + 1) % len(self.controls)
        if rl.is_key_pressed(rl.KEY_UP):
            self.selected = (self.selected - 1) % len(self.controls)

        steps = 0
        if rl.is_key_pressed(rl.KEY_RIGHT) or rl.is_key_pressed_repeat(rl.KEY_RIGHT):
            steps = 1
        elif rl.is_key_pressed(rl.KEY_LEFT) or rl.is_key_pressed_repeat(rl.KEY_LEFT):
            steps = -1
        if steps:
            name = self.controls[self.selected]
            try:
                self.scene.nudge_control(name, steps)
            except PreconditionViolation as e:
                print(f"Rejected {name}: {e}")

        for key, star in ((rl.KEY_G, "G"), (rl.KEY_K, "K"), (rl.KEY_M, "M")):
            if rl.is_key_pressed(key):
                self.scene.on_star_type_changed(star)
                print(f"Star type: {star}-type")

        if rl.is_key_pressed(rl.KEY_V):
            visible = self.scene.toggle_atmosphere()
            print(f"Atmosphere: {'ON' if visible else 'OFF'}")

        if rl.is_key_pressed(rl.KEY_SPACE):
            seed = random.randrange(0, 1_000_000)
            print(f"Generating with seed {seed}")
            self.scene.reseed(seed)

        if rl.is_key_pressed(rl.KEY_T):
            self.wireframe_mode = not self.wireframe_mode
            print(f"Wireframe mode: {'ON' if self.wireframe_mode else 'OFF'}")

        wheel = rl.get_mouse_wheel_move()
        if wheel:
            self.camera.position.z = max(1.5, self.camera.position.z - wheel * 0.5)

    def render(self):
        """Render the scene."""

        scene = self.scene
        angle = math.degrees(scene.rotation)
        axis = rl.Vector3(0.0, 1.0, 0.0)
        origin = rl.Vector3(0.0, 0.0, 0.0)
        s = scene.generation.planet_scale
        w = scene.settings.water_scale

        rl.begin_drawing()
        rl.clear_background(rl.BLACK)
        rl.begin_mode_3d(self.camera)

        if self.wireframe_mode:
            rl.draw_model_wires_ex(self.planet_model, origin, axis, angle, rl.Vector3(s, s, s), rl.GREEN)
        else:
            rl.draw_model_ex(self.planet_model, origin, axis, angle, rl.Vector3(s, s, s), rl.WHITE)

        rl.draw_model_ex(self.water_model, origin, axis, 0.0, rl.Vector3(w, w, w), rl.Color(0, 170, 255, 255))

        if scene.atmosphere.visible:
            # Back faces only, blended over the planet
            rl.begin_blend_mode(rl.BLEND_ALPHA)
            rl.rl_set_cull_face(rl.RL_CULL_FACE_FRONT)
            rl.draw_model_ex(self.atmosphere_model, origin, axis, angle, rl.Vector3(s, s, s), rl.WHITE)
            rl.rl_set_cull_face(rl.RL_CULL_FACE_BACK)
            rl.end_blend_mode()

        rl.end_mode_3d()
        self._draw_hud()
        rl.end_drawing()

    def _draw_hud(self):
        y = 10
        for i, name in enumerate(self.controls):
            value = self.scene.control_value(name)
            marker = ">" if i == self.selected else " "
            color = rl.YELLOW if i == self.selected else rl.LIGHTGRAY
            rl.draw_rectangle(10, y + 2, 60, 12, rl.DARKGRAY)
            rl.draw_rectangle(10, y + 2, int(60 * self.scene.slider_position(name)), 12, color)
            rl.draw_text(f"{marker} {name}: {value:.3f}", 78, y, 16, color)
            y += 20

        atmosphere = self.scene.atmosphere
        rl.draw_text(f"Star: {atmosphere.star_type.value}  Atmosphere: {'ON' if atmosphere.visible else 'OFF'}",
                     10, y + 10, 16, rl.LIGHTGRAY)

        right = rl.get_screen_width() - 230
        rl.draw_text(f"FPS: {rl.get_fps()}", right, 10, 16, rl.LIGHTGRAY)
        rl.draw_text(f"Upload time: {self.last_generation_time:.3f}s", right, 30, 16, rl.LIGHTGRAY)
        if self.analysis:
            y = 55
            for biome, fraction in self.analysis["biome_coverage"].items():
                rl.draw_text(f"{biome}: {fraction * 100:.1f}%", right, y, 16, rl.LIGHTGRAY)
                y += 20

        rl.draw_text("UP/DOWN select, LEFT/RIGHT adjust, G/K/M star, V atmosphere, SPACE seed, T wireframe",
                     10, rl.get_screen_height() - 25, 14, rl.GRAY)

    def run_main_loop(self):
        """Run the main rendering loop."""

        print("Starting planet viewer main loop...")

        while not rl.window_should_close():
            self.handle_input()
            self.scene.advance()
            self.render()

        # Cleanup
        rl.unload_model(self.planet_model)
        rl.unload_model(self.water_model)
        rl.unload_model(self.atmosphere_model)
        rl.unload_shader(self.planet_shader)
        rl.unload_shader(self.atmosphere_shader)
        rl.close_window()
        print("Planet viewer closed")


def main():
    """CLI entry point for planet viewer."""

    parser = argparse.ArgumentParser(description="Procedural Planet Viewer")
    parser.add_argument("--width", type=int, default=1024, help="Window width")
    parser.add_argument("--height", type=int, default=768, help="Window height")
    parser.add_argument("--sphere", choices=["uv", "ico"], default="uv", help="Base sphere layout")
    parser.add_argument("--segments", type=int, default=128, help="UV sphere segments (lower for faster rebuilds)")
    parser.add_argument("--subdivisions", type=int, default=5, help="Icosphere subdivision level")
    parser.add_argument("--backend", choices=["simplex", "jax"], default="jax",
                        help="Noise backend (jax rebuilds fast enough for live sliders)")
    parser.add_argument("--seed", type=int, default=None, help="Noise seed")

    args = parser.parse_args()

    if not RAYLIB_AVAILABLE:
        print("Error: pyray not available")
        print("Install with: pip install raylib")
        return 1

    seed = args.seed if args.seed is not None else random.randrange(0, 1_000_000)
    if args.backend == "jax":
        from src.procgen.jax_backend import JaxNoiseField
        noise = JaxNoiseField(seed=seed)
    else:
        noise = NoiseField(seed=seed)

    try:
        base = icosphere(args.subdivisions) if args.sphere == "ico" else uv_sphere(args.segments, args.segments)

        print(f"Building planet ({base.vertex_count} vertices, seed {seed})...")
        scene = PlanetScene(base_sphere=base, builder=PlanetMeshBuilder(TerrainSynthesizer(noise)))
        print("✓ Planet built")

        viewer = PlanetViewer(scene, window_width=args.width, window_height=args.height)
        viewer.initialize()
        viewer.run_main_loop()

        return 0

    except Exception as e:
        print(f"Error running planet viewer: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
