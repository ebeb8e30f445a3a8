import pygame
import pytest

from flapgate.core.session import Phase
from flapgate.graphics.assets import IMAGE_FILES, AssetLibrary
from flapgate.graphics.backend import SurfaceBackend
from flapgate.graphics.renderer import Frame, ImageCommand, Renderer

BIRD_BODY = (250, 200, 40)
PIPE_LIP = (70, 160, 40)


@pytest.fixture(autouse=True)
def headless_pygame(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    pygame.display.init()
    yield
    pygame.display.quit()


@pytest.fixture
def assets(tmp_path):
    library = AssetLibrary(tmp_path)
    library.load_all()
    return library


@pytest.fixture
def canvas(settings):
    return pygame.Surface((settings.canvas_width, settings.canvas_height))


def rgb(surface, x, y):
    return tuple(surface.get_at((x, y)))[:3]


def test_missing_files_fall_back_to_placeholders(assets):
    for handle in IMAGE_FILES:
        assert assets.get(handle) is not None
        assert assets.is_placeholder(handle)
    assert assets.get("nope") is None


def test_real_image_is_preferred(tmp_path):
    surface = pygame.Surface((52, 320))
    surface.fill((1, 2, 3))
    pygame.image.save(surface, str(tmp_path / IMAGE_FILES["pipe"]))

    library = AssetLibrary(tmp_path)
    library.load_all()

    assert not library.is_placeholder("pipe")
    assert rgb(library.get("pipe"), 10, 10) == (1, 2, 3)
    assert library.is_placeholder("bg")


def test_frame_is_drawn_in_order(assets, canvas, session, make_obstacle):
    session.phase = Phase.ACTIVE
    obstacle = make_obstacle(200, top_height=120)
    session.obstacles = [obstacle]

    SurfaceBackend(assets).execute(Renderer().render(session), canvas)

    # Bird sits on top of everything behind it
    assert rgb(canvas, 75, 175) == BIRD_BODY
    # Both pipe lips face the gap
    lip_x = int(obstacle.x) + 26
    assert rgb(canvas, lip_x, obstacle.gap_top - 1) == PIPE_LIP
    assert rgb(canvas, lip_x, obstacle.gap_bottom) == PIPE_LIP
    # The gap itself shows the background
    assert rgb(canvas, lip_x, obstacle.gap_top + 50) != PIPE_LIP


def test_unknown_handle_is_skipped(assets, canvas):
    backend = SurfaceBackend(assets)
    canvas.fill((9, 9, 9))

    backend.execute(Frame(commands=[ImageCommand("ghost", 0, 0)]), canvas)
    backend.execute(Frame(commands=[ImageCommand("ghost", 0, 0)]), canvas)

    assert rgb(canvas, 0, 0) == (9, 9, 9)


def test_variants_are_cached(assets):
    backend = SurfaceBackend(assets)
    command = ImageCommand("pipe", 0, 0, 52, 320, rotation=180)

    assert backend._variant(command) is backend._variant(command)
