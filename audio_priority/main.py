"""
CLI AudioPriority

audio-priority monitor                      - фоновые проходы по расписанию
audio-priority check                        - один проход через кэш-гейт (без переключения)
audio-priority refresh                      - ручное обновление с переключением
audio-priority list [--class output|input]  - ранжированный список устройств
audio-priority top|up|down|bottom|remove <output|input> <name>
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from . import __version__, create_backend, create_priority_editor, create_priority_monitor, create_storage
from .config.unified_config_loader import UnifiedConfigLoader
from .core.priority_editor import PriorityEditor
from .core.priority_monitor import PriorityMonitor
from .core.types import DeviceClass, EditResult, LaunchType, PassOutcome, RankedDevice
from .logging_setup import get_logger, setup_logging

logger = get_logger(__name__)
console = Console()

EDIT_COMMANDS = {
    "top": "set_top",
    "up": "move_up",
    "down": "move_down",
    "bottom": "move_to_bottom",
    "remove": "remove",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="audio-priority",
        description="AudioPriority - списки приоритетов аудио устройств",
    )
    parser.add_argument('--config', type=str, help='Путь к пользовательскому config.yaml')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('monitor', help='Фоновые проходы каждые polling_interval секунд')
    subparsers.add_parser('check', help='Один проход через кэш-гейт без переключения')
    subparsers.add_parser('refresh', help='Ручное обновление: переключиться на лучшие устройства')

    list_parser = subparsers.add_parser('list', help='Показать ранжированный список устройств')
    list_parser.add_argument('--class', dest='device_class', choices=[c.value for c in DeviceClass],
                             help='Только один класс устройств')

    for command in EDIT_COMMANDS:
        edit_parser = subparsers.add_parser(command, help=f'Операция "{command}" над списком приоритетов')
        edit_parser.add_argument('device_class', choices=[c.value for c in DeviceClass])
        edit_parser.add_argument('name', help='Имя устройства (без учета регистра)')

    return parser


def render_ranked_devices(device_class: DeviceClass, devices: List[RankedDevice]) -> Table:
    table = Table(title=f"{device_class.value.capitalize()} devices")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Transport")
    table.add_column("Status")

    for device in devices:
        if device.is_current:
            status = "[green]● active[/green]"
        elif device.is_available:
            status = "connected"
        else:
            status = "[dim]unavailable[/dim]"
        table.add_row(str(device.priority_rank), device.name, device.transport_type, status)
    return table


def _print_status(status: str):
    console.print(f"[blue]Статус:[/blue] {status}")


def _print_notification(message: str):
    console.print(f"[cyan]🔔 {message}[/cyan]")


async def run_monitor(monitor: PriorityMonitor, loader: UnifiedConfigLoader):
    logger.info("🚀 Монитор приоритетов запущен")
    while True:
        await monitor.run_pass(LaunchType.BACKGROUND)
        await asyncio.sleep(max(loader.get_priority_config().polling_interval, 0.5))


async def run_list(monitor: PriorityMonitor, device_class: Optional[str]) -> int:
    classes = [DeviceClass(device_class)] if device_class else list(DeviceClass)
    for cls in classes:
        devices = await monitor.list_ranked_devices(cls)
        console.print(render_ranked_devices(cls, devices))
    return 0


async def run_edit(editor: PriorityEditor, command: str, device_class: str, name: str) -> int:
    operation = getattr(editor, EDIT_COMMANDS[command])
    result: EditResult = await operation(DeviceClass(device_class), name)

    if result.changed:
        console.print(f"[green]✓ Список {device_class} обновлен[/green]")
    else:
        console.print("[yellow]Без изменений[/yellow]")
    for rank, entry in enumerate(result.priority_list, start=1):
        console.print(f"  {rank}. {entry}")
    if result.switched:
        console.print(f"[green]✓ Переключились на: {name}[/green]")
    return 0


async def run_command(args: argparse.Namespace, loader: UnifiedConfigLoader) -> int:
    storage = create_storage(loader)
    backend = create_backend(loader)

    if args.command in EDIT_COMMANDS:
        editor = create_priority_editor(loader, storage, backend, on_notification=_print_notification)
        return await run_edit(editor, args.command, args.device_class, args.name)

    monitor = create_priority_monitor(loader, storage, backend,
                                      on_status=_print_status, on_notification=_print_notification)

    if args.command == 'monitor':
        await run_monitor(monitor, loader)
        return 0
    if args.command == 'check':
        result = await monitor.run_pass(LaunchType.USER_INITIATED)
        return 1 if result.outcome == PassOutcome.ERROR else 0
    if args.command == 'refresh':
        result = await monitor.refresh()
        return 1 if result.outcome == PassOutcome.ERROR else 0
    if args.command == 'list':
        return await run_list(monitor, args.device_class)

    logger.error(f"❌ Неизвестная команда: {args.command}")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Точка входа audio-priority"""
    args = build_parser().parse_args(argv)

    loader = UnifiedConfigLoader(args.config)
    setup_logging(loader.get_logging_config())

    try:
        return asyncio.run(run_command(args, loader))
    except KeyboardInterrupt:
        logger.info("⏹️ Остановлено пользователем")
        return 0
    except Exception as e:
        logger.error(f"❌ Критическая ошибка: {e}", exc_info=True)
        console.print(f"[red]❌ {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
