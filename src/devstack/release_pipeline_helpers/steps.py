"""Command lines for each release step."""

from typing import List, Tuple

from .options import ReleaseOptions

BACKEND_DOCKERFILE = "packages/backend/Dockerfile"


def compile_steps() -> List[Tuple[str, List[str]]]:
    return [
        ("Building TypeScript", ["yarn", "tsc"]),
        ("Building backend bundle", ["yarn", "build:backend"]),
    ]


def image_build_command(options: ReleaseOptions) -> List[str]:
    return [
        "docker",
        "image",
        "build",
        ".",
        "-f",
        BACKEND_DOCKERFILE,
        "--tag",
        options.local_tag,
        "--tag",
        options.full_image,
    ]


def push_command(options: ReleaseOptions) -> List[str]:
    return ["docker", "push", options.full_image]


def kargo_refresh_command(options: ReleaseOptions) -> List[str]:
    return ["kargo", "refresh", "warehouse", options.warehouse, "-n", options.namespace]
