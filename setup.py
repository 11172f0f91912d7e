from setuptools import setup, find_packages

# Read requirements from requirements.txt
with open('requirements.txt') as f:
    requirements = f.read().splitlines()

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="texture-packer",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={
        "tests": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "texture-packer=texture_packer.main:main",
        ],
    },
    description="Sprite sheet packer with transparent border cropping",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    keywords="sprite, spritesheet, texture-atlas, packing",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Multimedia :: Graphics",
        "Development Status :: 4 - Beta",
    ],
    python_requires=">=3.11",
)
