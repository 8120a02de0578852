import os
from dotenv import load_dotenv

# --- Project paths ---
PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# .env is looked up in the current working directory (the caller's project root)
ENV_PATH = os.path.join(os.getcwd(), ".env")
load_dotenv(dotenv_path=ENV_PATH)

# --- small helpers for env parsing ---
def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return float(v)
    except Exception:
        return default


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return int(v)
    except Exception:
        return default


# --- Logging Configuration ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # options: DEBUG, INFO, WARNING, ERROR

# --- Rendering environment ---
# Pixel sizes are computed at a 96 dpi CSS pixel grid.
PLOT_BASE_DPI = _env_float("PLOT_BASE_DPI", 96.0)

# DPI of the reference display the device scale factor is derived from.
PLOT_REFERENCE_DPI = _env_float("PLOT_REFERENCE_DPI", 254.0)

# Headless runs have no display; 1.0 matches a standard-density screen.
PLOT_DEVICE_PIXEL_RATIO = _env_float("PLOT_DEVICE_PIXEL_RATIO", 1.0)

# --- Function legend labels ---
PLOT_RENDER_LABELS = _env_bool("PLOT_RENDER_LABELS", True)
PLOT_LABEL_FONT_SIZE_PX = _env_float("PLOT_LABEL_FONT_SIZE_PX", 10.0)
PLOT_LABEL_RENDER_SCALE = _env_int("PLOT_LABEL_RENDER_SCALE", 4)


if __name__ == "__main__":
    # Quick sanity check
    print(f"Package directory: {PACKAGE_DIR}")
    print(f"Looking for .env at: {ENV_PATH}")
    print(f"Log level: {LOG_LEVEL}")
    print(f"PLOT_BASE_DPI: {PLOT_BASE_DPI}")
    print(f"PLOT_REFERENCE_DPI: {PLOT_REFERENCE_DPI}")
    print(f"PLOT_DEVICE_PIXEL_RATIO: {PLOT_DEVICE_PIXEL_RATIO}")
    print(f"PLOT_RENDER_LABELS: {PLOT_RENDER_LABELS}")
    print(f"PLOT_LABEL_FONT_SIZE_PX: {PLOT_LABEL_FONT_SIZE_PX}")
    print(f"PLOT_LABEL_RENDER_SCALE: {PLOT_LABEL_RENDER_SCALE}")
