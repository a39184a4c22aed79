"""
Finance Manager UI - headless view-model driver.

Loads one list or card view model against the backend API and prints its
records and ribbon to the terminal.

Usage:
    python main.py --kind accounts                      # Account list
    python main.py --kind contacts --search bank        # Filtered contact list
    python main.py --kind contacts --id <uuid>          # Contact card
    python main.py --kind postings/account --id <uuid>  # Postings of one account
"""

from __future__ import annotations
import asyncio
import argparse
import sys
from typing import List, Optional
from uuid import UUID

from rich.console import Console
from rich.table import Table

from config.config_manager import ConfigManager
from config.models import AppConfig
from finance_ui.domain.interfaces import CurrentUser, FinanceApi, Localizer, Navigation
from finance_ui.domain.models import EMPTY_ID
from finance_ui.infrastructure import ApiClient, NavigationContext, ServiceProvider, SessionUser, YamlLocalizer
from finance_ui.utils.logging_setup import get_logger, set_log_timezone, setup_category_logging, shutdown_logging
from finance_ui.utils.trace_context import new_interaction
from finance_ui.viewmodels import BasePostingsListViewModel, default_card_registry, default_list_factory
from finance_ui.viewmodels.common import (
    BaseCardViewModel,
    BaseListViewModel,
    CardFieldKind,
    ListCellKind,
    ListColumnAlign,
    to_ui_groups,
)

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Finance Manager UI - view-model driver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --kind accounts
  python main.py --kind securities --env prod
  python main.py --kind savings-plans --id 3f0c...   # card
        """
    )

    parser.add_argument(
        "--env",
        type=str,
        default="dev",
        help="Environment config to load on top of base.yaml (default: dev)"
    )

    parser.add_argument(
        "--config-dir",
        type=str,
        default="config",
        help="Directory holding base.yaml, {env}.yaml and secrets.yaml (default: config)"
    )

    parser.add_argument(
        "--kind",
        type=str,
        default="accounts",
        help="List kind (accounts, contacts, savings-plans, securities, users, postings/<parent>) "
             "or card kind when --id is given"
    )

    parser.add_argument(
        "--id",
        type=UUID,
        help="Entity id: opens the card of that entity, or the parent of a postings list"
    )

    parser.add_argument(
        "--search",
        type=str,
        default="",
        help="Search text applied before loading a list"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level for all categories)"
    )

    return parser.parse_args(argv)


def build_services(config: AppConfig, api: ApiClient, uri: str = "/") -> ServiceProvider:
    """Service provider wired with the API client, a signed-in session and the page resources."""
    user = SessionUser()
    user.sign_in(EMPTY_ID, "cli", is_admin=True, preferred_language=config.ui.language)

    localizer = YamlLocalizer.load(
        config.ui.resources_dir,
        scope="pages",
        language=config.ui.language,
        fallback_language=config.ui.fallback_language,
    )

    services = ServiceProvider()
    services.register(FinanceApi, api)
    services.register(CurrentUser, user)
    services.register(Localizer, localizer)
    services.register(Navigation, NavigationContext(uri))
    return services


def _cell_text(cell) -> str:
    if cell.kind is ListCellKind.CURRENCY:
        return "" if cell.amount is None else f"{cell.amount:,.2f}"
    if cell.kind is ListCellKind.SYMBOL:
        return "◆" if cell.symbol_id else ""
    text = cell.text or ""
    return f"[dim]{text}[/dim]" if cell.muted else text


def render_list(console: Console, vm: BaseListViewModel) -> None:
    table = Table(title=vm.title or None, show_lines=False)
    for column in vm.columns:
        justify = "right" if column.align is ListColumnAlign.RIGHT else "left"
        table.add_column(column.title or column.key, justify=justify)
    for record in vm.records:
        table.add_row(*(_cell_text(c) for c in record.cells))
    console.print(table)
    more = " (more available)" if vm.can_load_more else ""
    console.print(f"{len(vm.items)} item(s){more}")


def render_card(console: Console, vm: BaseCardViewModel, localizer: Localizer) -> None:
    table = Table(title=vm.title or None, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for field in vm.card_record or []:
        if field.kind is CardFieldKind.CURRENCY:
            value = "" if field.amount is None else f"{field.amount:,.2f}"
        elif field.kind is CardFieldKind.SYMBOL:
            value = str(field.symbol_id or "")
        else:
            value = field.text or ""
            if value.startswith("$"):
                value = localizer[value[1:]].value
        marker = "" if field.editable else " [dim](read-only)[/dim]"
        table.add_row(localizer[field.label_key].value, value + marker)
    console.print(table)


def render_ribbon(console: Console, vm, localizer: Localizer) -> None:
    for group in to_ui_groups(vm.get_ribbon_registers(localizer)):
        labels = ", ".join(
            f"[dim]{item.label}[/dim]" if item.disabled else item.label for item in group.items
        )
        console.print(f"[bold]{group.title}[/bold]: {labels}")


async def main_async(args: argparse.Namespace) -> int:
    """Main async entry point."""
    config = ConfigManager(config_dir=args.config_dir, env=args.env).load()

    log_tz = config.logging.timezone
    set_log_timezone(log_tz if log_tz and log_tz.lower() != "local" else None)
    setup_category_logging(
        env=args.env,
        log_dir=config.logging.dir,
        level=config.logging.level,
        console=config.logging.console,
        verbose=args.verbose,
        json_files=config.logging.json,
    )

    console = Console()
    kind = args.kind.strip().lower()
    is_postings = kind.startswith("postings/")

    async with ApiClient(config.api.base_url, token=config.api.token, timeout=config.api.timeout_sec) as api:
        services = build_services(config, api)
        localizer = services.get_required_service(Localizer)

        with new_interaction() as interaction_id:
            logger.info(f"Opening {kind} (interaction {interaction_id})")

            if args.id is not None and not is_postings:
                card = default_card_registry().create(kind, services)
                try:
                    await card.initialize_async(args.id)
                    if card.last_error:
                        console.print(f"[red]{card.last_error}[/red]")
                    render_card(console, card, localizer)
                    render_ribbon(console, card, localizer)
                finally:
                    await card.dispose_async()
                return 1 if card.last_error else 0

            kwargs = {"entity_id": args.id} if is_postings and args.id is not None else {}
            vm = default_list_factory().create(kind, services, **kwargs)
            try:
                if isinstance(vm, BasePostingsListViewModel):
                    vm.page_size = config.ui.postings_page_size
                vm.set_search(args.search)
                await vm.initialize_async()
                if vm.last_error:
                    console.print(f"[red]{vm.last_error}[/red]")
                render_list(console, vm)
                render_ribbon(console, vm, localizer)
            finally:
                await vm.dispose_async()
            return 1 if vm.last_error else 0


def main() -> None:
    """Main entry point."""
    args = parse_args()
    try:
        sys.exit(asyncio.run(main_async(args)))
    except KeyboardInterrupt:
        print("Shutdown requested")
        sys.exit(0)
    except Exception as e:
        print(f"Fatal error: {e}")
        sys.exit(1)
    finally:
        shutdown_logging()


if __name__ == "__main__":
    main()
