"""README text for generated packages."""


def create_readme(name: str, api_version: str, package_version: str) -> str:
    return (
        f"# {name} {api_version}\n"
        "\n"
        f"TypeScript definitions for {name}. Generated from version {package_version}.\n"
        "\n"
        "Generated with [gi.ts](https://gitlab.gnome.org/ewlsh/gi.ts) and tracked in the "
        "[gi-ts Organization on GitHub](https://github.com/gi-ts).\n"
    )
