from types import MappingProxyType
from typing import Mapping
from heft.models.dependency import HeavyPackageEntry

# Exact npm package names only; scoped packages must include their scope.
HEAVY_PACKAGES: Mapping[str, HeavyPackageEntry] = MappingProxyType({
    name: HeavyPackageEntry(weight=weight, category=category)
    for name, weight, category in [
        # AI/ML & Computer Vision
        ("tensorflow", 10, "AI/ML"),
        ("@tensorflow/tfjs", 8, "AI/ML"),
        ("torch", 10, "AI/ML"),
        ("opencv", 9, "Computer Vision"),
        ("mediapipe", 8, "Computer Vision"),

        # Browser Automation
        ("puppeteer", 8, "Browser Automation"),
        ("playwright", 8, "Browser Automation"),
        ("selenium-webdriver", 7, "Browser Automation"),

        # Media
        ("sharp", 7, "Image Processing"),
        ("jimp", 5, "Image Processing"),
        ("canvas", 6, "Image Processing"),
        ("ffmpeg", 9, "Video Processing"),
        ("node-ffmpeg", 9, "Video Processing"),

        # Database clients
        ("mysql2", 4, "Database"),
        ("pg", 4, "Database"),
        ("mongodb", 5, "Database"),
        ("redis", 4, "Database"),
        ("elasticsearch", 6, "Database"),

        # Build Tools
        ("webpack", 5, "Build Tools"),
        ("vite", 4, "Build Tools"),
        ("rollup", 4, "Build Tools"),
        ("parcel", 4, "Build Tools"),

        # Frameworks & Desktop
        ("next", 5, "Framework"),
        ("nuxt", 5, "Framework"),
        ("electron", 7, "Desktop"),

        # Crypto
        ("bcrypt", 4, "Crypto"),
        ("crypto", 3, "Crypto"),
        ("argon2", 4, "Crypto"),

        # File Processing
        ("pdf-parse", 4, "File Processing"),
        ("xlsx", 4, "File Processing"),
        ("archiver", 3, "File Processing"),

        # Testing
        ("jest", 3, "Testing"),
        ("cypress", 6, "Testing"),
        ("@storybook/react", 5, "Testing"),
    ]
})

# Capability flag name-sets, declared independently of the categories above.
# AI_PACKAGES spans both the AI/ML and Computer Vision categories.
BROWSER_AUTOMATION_PACKAGES = frozenset({"puppeteer", "playwright", "selenium-webdriver"})
AI_PACKAGES = frozenset({"tensorflow", "@tensorflow/tfjs", "torch", "opencv", "mediapipe"})
IMAGE_PROCESSING_PACKAGES = frozenset({"sharp", "jimp", "canvas"})
VIDEO_PROCESSING_PACKAGES = frozenset({"ffmpeg", "node-ffmpeg"})
DATABASE_PACKAGES = frozenset({"mysql2", "pg", "mongodb", "redis", "elasticsearch"})

# (upper bound inclusive, level); anything above the last bound is CRITICAL.
RISK_THRESHOLDS = (
    (5, "LOW"),
    (15, "MEDIUM"),
    (30, "HIGH"),
)
