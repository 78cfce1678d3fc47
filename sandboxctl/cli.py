import sys
from typing import Callable, Optional, Tuple

import click

from . import __version__, exit_codes
from .config import load_env_files, RunConfig
from .errors import SandboxError
from .logging_utils import setup_logging, get_logger
from . import orchestrator


logger = get_logger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _flag_value(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    """
    값을 받는 옵션 뒤에 또 다른 옵션이 바로 오면 (예: --project-id --verbose) 사용법 오류로 처리한다.
    """
    if value is not None and value.startswith("-"):
        raise click.BadParameter(f"'{value}' looks like a flag, expected a value.")
    return value


def _value_option(*decls: str, help: str) -> Callable:  # noqa: A002
    return click.option(*decls, type=str, default=None, callback=_flag_value, help=help)


project_id_option = _value_option(
    "--project-id", "--project_id", "project_id",
    help="배포 대상 GCP 프로젝트 ID",
)
terraform_prefix_option = _value_option(
    "--terraform-prefix", "--terraform_prefix", "terraform_prefix",
    help="Terraform state prefix (한 프로젝트에 여러 배포를 둘 때 사용)",
)
verbose_option = click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="실행하는 명령과 DEBUG 로그를 출력합니다.",
)
version_option = click.version_option(__version__, "--version", prog_name="sandboxctl")


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="Cloud Ops Sandbox 저장소 루트 (terraform/, kustomize/ 가 있는 디렉토리, 기본: 현재 디렉토리)",
)
@version_option
@click.pass_context
def main(ctx: click.Context, chdir: str) -> None:
    """Cloud Ops Sandbox 생성/삭제용 CLI"""
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help(), err=True)
        ctx.exit(exit_codes.FATAL)


def _build_config(ctx: click.Context, **options) -> RunConfig:  # noqa: ANN003
    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    cfg = RunConfig.from_options(base_dir=base_dir, **options)
    logger.debug("Config loaded: %s", cfg)
    return cfg


def _run(action: Callable[[], Tuple[int, str]]) -> None:
    try:
        code, summary = action()
    except SandboxError as e:
        click.echo(f"[ERROR] {e}", err=True)
        if e.hint:
            click.echo(e.hint, err=True)
        sys.exit(e.exit_code)
    except click.Abort:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception("실행 중 오류 발생")
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    click.echo(summary, err=code != exit_codes.SUCCESS)
    sys.exit(code)


def _confirm(message: str) -> bool:
    return click.confirm(message, default=False)


@main.command(context_settings=CONTEXT_SETTINGS)
@_value_option(
    "--cluster-location", "--cluster_location", "cluster_location",
    help="GKE 클러스터 location (region 또는 zone)",
)
@_value_option(
    "--cluster-name", "--cluster_name", "cluster_name",
    help="GKE 클러스터 이름",
)
@project_id_option
@click.option("--skip-asm", "--skip_asm", "skip_asm", is_flag=True, help="서비스 메시(ASM)를 설치하지 않습니다.")
@click.option(
    "--skip-loadgenerator",
    "--skip_loadgenerator",
    "skip_loadgenerator",
    is_flag=True,
    help="부하 생성기(loadgenerator)를 배포하지 않습니다.",
)
@terraform_prefix_option
@verbose_option
@version_option
@click.pass_context
def create(
    ctx: click.Context,
    cluster_location: Optional[str],
    cluster_name: Optional[str],
    project_id: Optional[str],
    skip_asm: bool,
    skip_loadgenerator: bool,
    terraform_prefix: Optional[str],
    verbose: bool,
) -> None:
    """Cloud Ops Sandbox 를 GCP 프로젝트에 배포"""
    setup_logging(verbose)
    cfg = _build_config(
        ctx,
        project_id=project_id,
        cluster_name=cluster_name,
        cluster_location=cluster_location,
        terraform_prefix=terraform_prefix,
        verbose=verbose,
        skip_loadgenerator=skip_loadgenerator,
        skip_asm=skip_asm,
    )
    _run(lambda: orchestrator.create(cfg, confirm=_confirm))


@main.command(context_settings=CONTEXT_SETTINGS)
@project_id_option
@terraform_prefix_option
@verbose_option
@version_option
@click.pass_context
def delete(
    ctx: click.Context,
    project_id: Optional[str],
    terraform_prefix: Optional[str],
    verbose: bool,
) -> None:
    """배포된 Cloud Ops Sandbox 를 삭제"""
    setup_logging(verbose)
    cfg = _build_config(
        ctx,
        project_id=project_id,
        terraform_prefix=terraform_prefix,
        verbose=verbose,
    )
    _run(lambda: orchestrator.delete(cfg))
