[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stashapi"
version = "0.1.0"
description = "Small JSON CRUD HTTP service backed by Redis or a SQL database, with interactive console clients"
requires-python = ">=3.10"
keywords = ["http", "rest", "crud", "fastapi", "redis", "postgresql", "sqlalchemy", "api"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Framework :: FastAPI",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Database :: Front-Ends",
]
dependencies = [
    "fastapi",
    "pydantic>=2",
    "redis>=5",
    "sqlalchemy>=2",
    "uvicorn",
    "python-dotenv",
    "httpx",
    "termcolor",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "httpx",
]

[project.scripts]
stashapi = "stashapi.app:main"
stashapi-redis-client = "stashapi.redis_client:main"
stashapi-sqlx-client = "stashapi.sqlx_client:main"

[tool.hatch.build.targets.wheel]
packages = ["stashapi"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
