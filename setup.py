from setuptools import setup, find_packages

setup(
    name="clai",
    version="0.3.0",
    description="CLI assistant that turns natural language into shell commands using LLM providers",
    license="MIT",
    packages=find_packages(include=["clai", "clai.*"]),
    install_requires=[
        "httpx>=0.27.0",
        "mistralai>=1.0.0,<2",
        "typer>=0.12.0",
        "rich>=13.0.0",
        "prompt_toolkit>=3.0.36",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "clai=clai.main:clai",
        ],
    },
    python_requires=">=3.10",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
)
