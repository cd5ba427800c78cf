from __future__ import annotations

import json
from typing import Any

import streamlit.components.v1 as components


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _safe_float(value: object, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if result == result else default


def _safe_vec3(value: object, default: tuple[float, float, float]) -> list[float]:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        return list(default)
    return [_safe_float(item, fallback) for item, fallback in zip(value, default, strict=True)]


def _frame_payload(frame: dict[str, Any]) -> dict[str, Any]:
    rendering = frame.get("rendering") or {}
    camera = frame.get("camera") or {}
    tour = frame.get("tour") or {}
    return {
        "rendering": {
            "shadow_map_size": max(1, int(_safe_float(rendering.get("shadow_map_size"), 512.0))),
            "pixel_ratio": _clamp(_safe_float(rendering.get("pixel_ratio"), 1.0), 0.5, 2.0),
            "antialiasing_enabled": bool(rendering.get("antialiasing_enabled", False)),
            "shadows_enabled": bool(rendering.get("shadows_enabled", False)),
            "post_processing_enabled": bool(rendering.get("post_processing_enabled", False)),
            "quality_name": str(rendering.get("quality_name", "LOW")),
        },
        "camera": {
            "position": _safe_vec3(camera.get("position"), (50.0, 30.0, 50.0)),
            "target": _safe_vec3(camera.get("target"), (0.0, 12.0, 0.0)),
        },
        "tour_active": bool(tour.get("active", False)),
        "tour_waypoint": tour.get("waypoint") or "",
        "free_orbit_enabled": bool(frame.get("free_orbit_enabled", True)),
        "core_scale": _clamp(_safe_float(frame.get("core_scale"), 1.0), 0.9, 1.1),
        "plant_rotation": _safe_float(frame.get("plant_rotation"), 0.0),
        "tubes": [
            {
                "x": _safe_float(tube.get("x"), 0.0),
                "z": _safe_float(tube.get("z"), 0.0),
                "flux": _clamp(_safe_float(tube.get("flux"), 0.0), 0.0, 1.0),
                "fuel_emissive": max(0.0, _safe_float(tube.get("fuel_emissive"), 0.0)),
            }
            for tube in frame.get("tubes", [])
        ],
        "control_rods": [
            {"x": _safe_float(rod.get("x"), 0.0), "z": _safe_float(rod.get("z"), 0.0)}
            for rod in frame.get("control_rods", [])
        ],
    }


def render_plant_3d(frame: dict[str, Any], height: int = 560) -> None:
    payload_json = json.dumps(_frame_payload(frame))

    html_template = """
<div id="atucha-plant3d-root" style="width:100%;height:__HEIGHT__px;position:relative;background:#0f172a;border:1px solid rgba(71,95,125,0.55);overflow:hidden;"></div>
<script src="https://cdn.jsdelivr.net/npm/three@0.159.0/build/three.min.js"></script>
<script src="https://cdn.jsdelivr.net/npm/three@0.159.0/examples/js/controls/OrbitControls.js"></script>
<script>
(function () {
  const ENGINE_KEY = "__atuchaPlant3DEngine";
  const frame = __PAYLOAD__;
  const container = document.getElementById("atucha-plant3d-root");
  if (!container) return;

  function fluxColor(three, flux) {
    const cool = new three.Color("#1e40af");
    const hot = new three.Color("#f59e0b");
    return cool.lerp(hot, Math.max(0, Math.min(1, flux)));
  }

  function addBox(three, group, size, position, color) {
    const mesh = new three.Mesh(
      new three.BoxGeometry(size[0], size[1], size[2]),
      new three.MeshStandardMaterial({ color: color, metalness: 0.4, roughness: 0.6 })
    );
    mesh.position.set(position[0], position[1], position[2]);
    mesh.castShadow = true;
    mesh.receiveShadow = true;
    group.add(mesh);
    return mesh;
  }

  function addCylinder(three, group, top, bottom, height, position, color, opacity) {
    const material = new three.MeshStandardMaterial({
      color: color, metalness: 0.2, roughness: 0.7,
      transparent: opacity < 1.0, opacity: opacity,
    });
    const mesh = new three.Mesh(new three.CylinderGeometry(top, bottom, height, 48), material);
    mesh.position.set(position[0], position[1], position[2]);
    mesh.castShadow = true;
    mesh.receiveShadow = true;
    group.add(mesh);
    return mesh;
  }

  function buildCore(three, core) {
    const tubes = frame.tubes;
    const tubeGeometry = new three.CylinderGeometry(0.135, 0.135, 6.2, 16);
    tubeGeometry.rotateZ(Math.PI / 2);
    const tubeMaterial = new three.MeshStandardMaterial({
      color: "#ffffff", metalness: 0.8, roughness: 0.25,
      emissive: "#f59e0b", emissiveIntensity: 0.0,
    });
    const tubeMesh = new three.InstancedMesh(tubeGeometry, tubeMaterial, Math.max(1, tubes.length));
    const matrix = new three.Matrix4();
    let emissiveSum = 0.0;
    for (let i = 0; i < tubes.length; i++) {
      matrix.makeTranslation(tubes[i].x, 0, tubes[i].z);
      tubeMesh.setMatrixAt(i, matrix);
      tubeMesh.setColorAt(i, fluxColor(three, tubes[i].flux));
      emissiveSum += tubes[i].fuel_emissive;
    }
    tubeMesh.count = tubes.length;
    tubeMaterial.emissiveIntensity = tubes.length ? emissiveSum / tubes.length : 0.0;
    tubeMesh.castShadow = true;
    core.add(tubeMesh);

    const rods = frame.control_rods;
    const rodMesh = new three.InstancedMesh(
      new three.CylinderGeometry(0.045, 0.045, 5.5, 12),
      new three.MeshStandardMaterial({ color: "#1f2937", metalness: 0.95, roughness: 0.05 }),
      Math.max(1, rods.length)
    );
    for (let i = 0; i < rods.length; i++) {
      matrix.makeTranslation(rods[i].x, 2.75, rods[i].z);
      rodMesh.setMatrixAt(i, matrix);
    }
    rodMesh.count = rods.length;
    rodMesh.castShadow = true;
    core.add(rodMesh);

    addCylinder(three, core, 8.5, 8.5, 5.8, [0, 0, 0], "#e5e7eb", 0.25);
  }

  function createEngine(three) {
    const rendering = frame.rendering;
    const width = Math.max(container.clientWidth, 320);
    const height = Math.max(container.clientHeight, 240);

    const scene = new three.Scene();
    scene.background = new three.Color("#0f172a");
    const camera = new three.PerspectiveCamera(60, width / height, 0.1, 600);

    const renderer = new three.WebGLRenderer({
      antialias: rendering.antialiasing_enabled,
      alpha: false,
      powerPreference: "high-performance",
      stencil: false,
    });
    renderer.setPixelRatio(rendering.pixel_ratio);
    renderer.setSize(width, height, false);
    renderer.outputColorSpace = three.SRGBColorSpace;
    renderer.toneMapping = three.ACESFilmicToneMapping;
    renderer.toneMappingExposure = rendering.post_processing_enabled ? 1.1 : 1.0;
    renderer.shadowMap.enabled = rendering.shadows_enabled;
    renderer.shadowMap.type = three.PCFSoftShadowMap;
    renderer.domElement.style.width = "100%";
    renderer.domElement.style.height = "100%";
    renderer.domElement.style.display = "block";
    container.appendChild(renderer.domElement);

    scene.add(new three.HemisphereLight("#e0f2fe", "#fef3c7", 0.7));
    scene.add(new three.AmbientLight("#f8fafc", 0.45));
    const sun = new three.DirectionalLight("#ffffff", 1.6);
    sun.position.set(50, 80, 30);
    sun.castShadow = rendering.shadows_enabled;
    sun.shadow.mapSize.set(rendering.shadow_map_size, rendering.shadow_map_size);
    sun.shadow.camera.left = -80;
    sun.shadow.camera.right = 80;
    sun.shadow.camera.top = 80;
    sun.shadow.camera.bottom = -80;
    sun.shadow.camera.far = 300;
    sun.shadow.bias = -0.0001;
    scene.add(sun);

    const ground = new three.Mesh(
      new three.PlaneGeometry(200, 200),
      new three.MeshStandardMaterial({ color: "#0b1220", roughness: 0.9 })
    );
    ground.rotation.x = -Math.PI / 2;
    ground.position.y = -0.05;
    ground.receiveShadow = true;
    scene.add(ground);

    const plant = new three.Group();
    plant.rotation.y = frame.plant_rotation;
    scene.add(plant);
    addCylinder(three, plant, 20, 20, 30, [0, 15, 0], "#e8eaed", 0.35);
    addBox(three, plant, [30, 20, 15], [40, 10, 0], "#6b7280");
    addCylinder(three, plant, 8, 12, 50, [-30, 25, 20], "#9ca3af", 1.0);
    addCylinder(three, plant, 8, 12, 50, [-30, 25, -20], "#9ca3af", 1.0);

    const core = new three.Group();
    core.position.set(0, 5, 0);
    core.scale.setScalar(1.2 * frame.core_scale);
    plant.add(core);
    buildCore(three, core);

    const OrbitControlsCtor = three.OrbitControls || window.OrbitControls;
    const controls = OrbitControlsCtor ? new OrbitControlsCtor(camera, renderer.domElement) : null;
    if (controls) {
      controls.enableDamping = true;
      controls.minDistance = 10;
      controls.maxDistance = 200;
      controls.maxPolarAngle = Math.PI / 2;
      controls.enabled = frame.free_orbit_enabled;
    }

    const pos = frame.camera.position;
    const target = frame.camera.target;
    camera.position.set(pos[0], pos[1], pos[2]);
    if (controls) {
      controls.target.set(target[0], target[1], target[2]);
      controls.update();
    } else {
      camera.lookAt(target[0], target[1], target[2]);
    }

    let rafHandle = null;
    function animate() {
      if (controls && controls.enabled) {
        controls.update();
      }
      renderer.render(scene, camera);
      rafHandle = requestAnimationFrame(animate);
    }
    rafHandle = requestAnimationFrame(animate);

    return {
      dispose: function () {
        if (rafHandle) {
          cancelAnimationFrame(rafHandle);
        }
        if (controls) {
          controls.dispose();
        }
        renderer.dispose();
      },
    };
  }

  function ensureThreeAndRender() {
    if (!window.THREE) {
      requestAnimationFrame(ensureThreeAndRender);
      return;
    }
    const existing = window[ENGINE_KEY];
    if (existing && typeof existing.dispose === "function") {
      existing.dispose();
    }
    container.innerHTML = "";
    window[ENGINE_KEY] = createEngine(window.THREE);
  }

  ensureThreeAndRender();
})();
</script>
"""

    html = html_template.replace("__HEIGHT__", str(height)).replace("__PAYLOAD__", payload_json)
    components.html(html, height=height + 2, scrolling=False)


__all__ = ["render_plant_3d"]
