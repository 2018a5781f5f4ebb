from setuptools import setup, find_packages

setup(
    name="servicegraph",
    version="0.1.0",
    packages=find_packages(include=["servicegraph", "servicegraph.*"]),
    install_requires=[
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    author="servicegraph developers",
    author_email="your.email@example.com",
    description="Configuration-driven dependency resolution and object lifecycle engine",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
)
