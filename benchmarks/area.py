from pathlib import Path

from pngdiff.png import load_png

here = Path(__file__).resolve().parent
base_path = here / ".." / "fixtures" / "large" / "base.png"
target_path = here / ".." / "fixtures" / "large" / "target.png"
base = load_png(base_path)
target = load_png(target_path)

print(base.area)
print(target.area)
