"""supportflow 命令行入口

使用方式：
    python -m supportflow run               # 启动交互式支持会话
    python -m supportflow kb senha login    # 按关键词查询知识库
    python -m supportflow demo              # 离线演示（脚本化推理服务）
"""
import sys

import click
from rich.console import Console

from supportflow.exceptions import ConfigurationError, KnowledgeBaseError


@click.group()
def main():
    """客户支持工作流"""
    pass


@main.command("run")
@click.option(
    "--config",
    "config_path",
    default=None,
    help="配置文件路径（默认: config.yaml）",
)
@click.option(
    "--kb",
    default=None,
    help="知识库文件路径（默认: data/known_issues.json）",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="输出 DEBUG 日志并显示阶段切换",
)
def run(config_path: str, kb: str, verbose: bool):
    """启动交互式支持会话"""
    from supportflow.cli.main import SupportCLI
    from supportflow.utils.config import load_config
    from supportflow.utils.logging import setup_logging

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Erro de configuração: {e}", err=True)
        sys.exit(1)

    setup_logging(config.logging.level, verbose=verbose)
    if kb:
        config.workflow.knowledge_base_path = kb

    sys.exit(SupportCLI(config, show_stages=verbose).run())


@main.command("kb")
@click.argument("keywords", nargs=-1, required=True)
@click.option(
    "--kb",
    default=None,
    help="知识库文件路径（默认: data/known_issues.json）",
)
def search_known_issues(keywords: tuple, kb: str):
    """按关键词查询知识库"""
    from supportflow.cli.rendering import SupportRenderer
    from supportflow.dao.known_issue_dao import KnownIssueDAO

    try:
        issues = KnownIssueDAO(kb).find_by_keywords(keywords)
    except KnowledgeBaseError as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    console = Console()
    console.print(SupportRenderer(console).render_known_issues(issues))


@main.command("demo")
@click.option(
    "--kb",
    default=None,
    help="知识库文件路径（默认: data/known_issues.json）",
)
def demo(kb: str):
    """离线演示（不访问网络）"""
    from supportflow.cli.demo import DEMO_REPLIES, EchoScriptedChannel, ScriptedClient, build_demo_config
    from supportflow.cli.main import SupportCLI
    from supportflow.services.llm_service import LLMService

    config = build_demo_config(kb)
    console = Console()
    cli = SupportCLI(
        config,
        console=console,
        channel=EchoScriptedChannel(DEMO_REPLIES, console),
        llm_service=LLMService(config, client=ScriptedClient()),
        show_stages=True,
    )
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
