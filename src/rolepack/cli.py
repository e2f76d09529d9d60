# cli.py
from __future__ import annotations

import sys

import click

from rolepack import __version__, settings
from rolepack.builder import PackagesImageBuilder
from rolepack.catalog import DockerImageCatalog, ImageCatalog, MemoryImageCatalog
from rolepack.errors import PackError
from rolepack.loader import load_roles
from rolepack.model import unique_packages
from rolepack.ui.console import Console, get_console, set_console


def _fail(ctx: click.Context, exc: Exception) -> None:
    console = get_console()
    if isinstance(exc, PackError):
        details = [f"{k}={v}" for k, v in exc.details.items()]
        console.print_error(exc.kind, exc.message, details=details or None)
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
    else:
        console.print_exception(exc)
    sys.exit(1)


def _make_builder(
    stemcell: str | None,
    stemcell_id: str | None,
    repository: str,
    version: str,
    compiled_packages: str,
    output_dir: str,
    catalog: ImageCatalog,
) -> PackagesImageBuilder:
    if not stemcell:
        get_console().print_error(
            "No stemcell image",
            "A stemcell image name is required.",
            suggestion="Pass --stemcell or set ROLEPACK_STEMCELL:\n  rolepack context --roles roles.py --stemcell my/stemcell:latest",
        )
        sys.exit(1)
    return PackagesImageBuilder(
        repository,
        stemcell,
        compiled_packages,
        output_dir,
        catalog,
        version=version,
        stemcell_image_id=stemcell_id,
    )


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.version_option(__version__, prog_name="rolepack")
@click.pass_context
def cli(ctx, debug):
    """rolepack — shared packages layer for role images."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("--roles", "roles_file", required=True, help="Python file defining roles() or ROLES")
@click.option("--stemcell", default=settings.STEMCELL, help="Stemcell image name")
@click.option("--stemcell-id", default=None, help="Stemcell image ID (looked up in Docker if omitted)")
@click.option("--repository", default=settings.REPOSITORY, show_default=True, help="Image name prefix")
@click.option("--tool-version", "tool_version", default=__version__, show_default=True, help="Generator version baked into labels and tags")
@click.option("--docker-bin", default=settings.DOCKER_BIN, show_default=True, help="Docker CLI binary")
@click.pass_context
def name(ctx, roles_file, stemcell, stemcell_id, repository, tool_version, docker_bin):
    """Print the packages layer image reference for a set of roles."""
    console = get_console()
    try:
        roles = load_roles(roles_file)
        builder = _make_builder(
            stemcell,
            stemcell_id,
            repository,
            tool_version,
            settings.COMPILED_PACKAGES,
            settings.OUTPUT_DIR,
            DockerImageCatalog(docker_bin),
        )
        console.print_info(builder.image_name(roles))
    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.option("--roles", "roles_file", required=True, help="Python file defining roles() or ROLES")
@click.option("--stemcell", default=settings.STEMCELL, help="Stemcell image name")
@click.option("--stemcell-id", default=None, help="Stemcell image ID (looked up in Docker if omitted)")
@click.option("--repository", default=settings.REPOSITORY, show_default=True, help="Image name prefix")
@click.option("--tool-version", "tool_version", default=__version__, show_default=True, help="Generator version baked into labels and tags")
@click.option("--compiled-packages", default=settings.COMPILED_PACKAGES, show_default=True, help="Compiled packages directory")
@click.option("--output-dir", default=settings.OUTPUT_DIR, show_default=True, help="Where the context tarball is written")
@click.option("--force-build-all/--reuse-layers", default=False, help="Build FROM the stemcell with every package")
@click.option("--no-catalog", is_flag=True, default=False, help="Do not query Docker for reusable layers")
@click.option("--docker-bin", default=settings.DOCKER_BIN, show_default=True, help="Docker CLI binary")
@click.pass_context
def context(
    ctx,
    roles_file,
    stemcell,
    stemcell_id,
    repository,
    tool_version,
    compiled_packages,
    output_dir,
    force_build_all,
    no_catalog,
    docker_bin,
):
    """Write the docker build context for the packages layer image."""
    console = get_console()
    try:
        roles = load_roles(roles_file)
        console.print_context_started(
            roles_file=roles_file,
            role_count=len(roles),
            package_count=len(unique_packages(roles)),
        )

        catalog: ImageCatalog = MemoryImageCatalog() if no_catalog else DockerImageCatalog(docker_bin)
        if no_catalog and not stemcell_id:
            # nothing to look the stemcell up in; identify it by name
            stemcell_id = stemcell

        builder = _make_builder(
            stemcell,
            stemcell_id,
            repository,
            tool_version,
            compiled_packages,
            output_dir,
            catalog,
        )

        path = builder.write_context_tarball(roles, force_build_all=force_build_all)
        console.print_image_name(builder.image_name(roles))
        console.print_context_written(str(path))
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        _fail(ctx, e)


if __name__ == "__main__":
    cli()
