from setuptools import setup, find_packages

setup(
    name="hbs-render",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pybars3>=0.9.7",
        "aiofiles>=23.2.1",
        "pydantic>=2.0.0,<3.0.0",
        "pyyaml>=6.0",
        "python-dotenv>=1.0.0",
        "typer>=0.9.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21.0",
            "black>=23.0",
            "isort>=5.0",
            "mypy>=1.0"
        ]
    },
    entry_points={
        "console_scripts": [
            "hbs-render=hbs_render.cli.main:main",
        ],
    },
    python_requires=">=3.8",
    description="Server-side Handlebars rendering with mtime-validated template caching",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
