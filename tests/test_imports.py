def test_import():
    import atucha

    assert atucha.__version__ == "0.1.0"


def test_public_api_imports() -> None:
    from atucha.capabilities import CapabilityProbe, DeviceCapabilities
    from atucha.lattice import LatticeCache, generate
    from atucha.quality import QualityController, QualityLevel
    from atucha.scene import build_scene_frame
    from atucha.tour import DEFAULT_TOUR, TourController, tour_timeline

    assert CapabilityProbe is not None
    assert DeviceCapabilities is not None
    assert LatticeCache is not None
    assert generate is not None
    assert QualityController is not None
    assert QualityLevel is not None
    assert build_scene_frame is not None
    assert DEFAULT_TOUR is not None
    assert TourController is not None
    assert tour_timeline is not None
