from __future__ import annotations

from setuptools import find_packages, setup


def load_dependencies() -> list[str]:
    """Assemble install_requires for the planner and recorder core."""
    return [
        # Data handling
        "pydantic>=2.0.0",
        # Camera capture and encoding
        "opencv-python-headless>=4.8.0",
    ]


setup(
    name="calidrone",
    version="0.1.0",
    description="Drone flight path planning and camera recording core",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=load_dependencies(),
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "numpy",
        ],
    },
)
