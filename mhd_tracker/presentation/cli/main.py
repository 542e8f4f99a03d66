"""
CLI 진입점 -- 모든 CLI 명령의 통합 디스패처

Usage:
    python -m mhd_tracker.presentation.cli.main add --name 우유 --expiry 2026-10-25 --qty 3
    python -m mhd_tracker.presentation.cli.main add --id 3F2A... --expiry 2026-10-27
    python -m mhd_tracker.presentation.cli.main list --search milk --status soon --sort daysAsc
    python -m mhd_tracker.presentation.cli.main delete 3F2A...
    python -m mhd_tracker.presentation.cli.main settings --soon-days 5 --no-notify-soon
    python -m mhd_tracker.presentation.cli.main export --out backup.json
    python -m mhd_tracker.presentation.cli.main import backup.json
    python -m mhd_tracker.presentation.cli.main check
"""

import argparse
import sys
from typing import List, Optional

from mhd_tracker.domain.item_query import SortKey, StatusFilter
from mhd_tracker.errors import TrackerError
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """CLI 파서 생성"""
    parser = argparse.ArgumentParser(
        prog="mhd-tracker",
        description="MHD(유통기한) 트래커 CLI",
    )
    parser.add_argument("--db", type=str, default=None, help="SQLite DB 경로")

    subparsers = parser.add_subparsers(dest="command", help="명령")

    # add 명령
    add_parser = subparsers.add_parser("add", help="상품 등록 (--id 지정 시 수정)")
    add_parser.add_argument("--id", type=str, default=None, help="수정할 상품 ID")
    add_parser.add_argument("--name", type=str, default=None, help="상품명 (등록 시 필수)")
    add_parser.add_argument("--expiry", type=str, default=None, help="유통기한 YYYY-MM-DD (등록 시 필수)")
    add_parser.add_argument("--received", type=str, default=None, help="입고일 (기본: 오늘)")
    add_parser.add_argument("--sku", type=str, default=None, help="SKU")
    add_parser.add_argument("--category", type=str, default=None, help="카테고리")
    add_parser.add_argument("--supplier", type=str, default=None, help="공급처")
    add_parser.add_argument("--lot", type=str, default=None, help="LOT 번호")
    add_parser.add_argument("--qty", type=int, default=None, help="수량 (기본: 1)")

    # delete 명령
    delete_parser = subparsers.add_parser("delete", help="상품 삭제")
    delete_parser.add_argument("item_id", type=str, help="상품 ID")

    # list 명령
    list_parser = subparsers.add_parser("list", help="상품 목록")
    list_parser.add_argument("--search", type=str, default="", help="검색어")
    list_parser.add_argument(
        "--status", type=str, default=StatusFilter.ALL.value,
        choices=[f.value for f in StatusFilter], help="상태 필터",
    )
    list_parser.add_argument(
        "--sort", type=str, default=SortKey.MHD_ASC.value,
        choices=[k.value for k in SortKey], help="정렬 기준",
    )

    # settings 명령
    settings_parser = subparsers.add_parser("settings", help="설정 조회/변경")
    settings_parser.add_argument("--soon-days", type=int, default=None, help="임박 기준 일수")
    settings_parser.add_argument(
        "--notify-soon", dest="notify_soon", action="store_true", default=None,
        help="임박 알림 켜기",
    )
    settings_parser.add_argument(
        "--no-notify-soon", dest="notify_soon", action="store_false",
        help="임박 알림 끄기",
    )
    settings_parser.add_argument(
        "--notify-expired", dest="notify_expired", action="store_true", default=None,
        help="경과 알림 켜기",
    )
    settings_parser.add_argument(
        "--no-notify-expired", dest="notify_expired", action="store_false",
        help="경과 알림 끄기",
    )

    # export / import 명령
    export_parser = subparsers.add_parser("export", help="JSON 내보내기")
    export_parser.add_argument("--out", type=str, default=None, help="출력 파일 경로")

    import_parser = subparsers.add_parser("import", help="JSON 가져오기 (전체 교체)")
    import_parser.add_argument("path", type=str, help="가져올 파일 경로")

    # check 명령
    subparsers.add_parser("check", help="유통기한 평가 1회 실행")

    return parser


def _create_app(args):
    """트래커 생성 (스케줄러는 시작하지 않음)"""
    from mhd_tracker.application.bootstrap import create_tracker
    return create_tracker(db_path=args.db)


def cmd_add(args):
    """상품 등록/수정 (수정 시 지정하지 않은 항목은 기존 값 유지)"""
    app = _create_app(args)
    given = {
        "name": args.name,
        "expiryDate": args.expiry,
        "receivedDate": args.received,
        "sku": args.sku,
        "category": args.category,
        "supplier": args.supplier,
        "lot": args.lot,
        "quantity": args.qty,
    }
    data = {key: value for key, value in given.items() if value is not None}
    if args.id:
        data = {**app.service.get_item(args.id).to_dict(), **data}
    item = app.service.upsert_item(data)
    print(f"저장 완료: {item.id} {item.name} (유통기한 {item.expiry_date}, 수량 {item.quantity})")
    return item


def cmd_delete(args):
    """상품 삭제"""
    app = _create_app(args)
    if app.service.delete_item(args.item_id):
        print(f"삭제 완료: {args.item_id}")
        return True
    print(f"상품 없음: {args.item_id}")
    return False


def cmd_list(args):
    """상품 목록 출력"""
    app = _create_app(args)
    entries = app.service.query_items(search=args.search, status=args.status, sort=args.sort)
    print(f"상품 목록: {len(entries)}개 (임박 기준 {app.service.settings.soon_threshold_days}일)")
    for entry in entries:
        item = entry.item
        print(
            f"  {item.id}  {item.name[:20]:20s} {item.expiry_date or '-':10s}"
            f" {str(entry.days_remaining):>5s}일  {entry.status.label:4s}"
            f"  qty={item.quantity} {item.lot}"
        )
    return entries


def cmd_settings(args):
    """설정 조회/변경"""
    app = _create_app(args)
    changed = (
        args.soon_days is not None
        or args.notify_soon is not None
        or args.notify_expired is not None
    )
    if changed:
        settings = app.service.update_settings(
            soon_threshold_days=args.soon_days,
            notify_soon_enabled=args.notify_soon,
            notify_expired_enabled=args.notify_expired,
        )
    else:
        settings = app.service.settings
    print(
        f"설정: 임박 기준={settings.soon_threshold_days}일, "
        f"임박 알림={'on' if settings.notify_soon_enabled else 'off'}, "
        f"경과 알림={'on' if settings.notify_expired_enabled else 'off'}"
    )
    return settings


def cmd_export(args):
    """JSON 내보내기"""
    app = _create_app(args)
    path = app.service.export_to_file(args.out)
    print(f"내보내기: {path}")
    return path


def cmd_import(args):
    """JSON 가져오기"""
    app = _create_app(args)
    count = app.service.import_from_file(args.path)
    print(f"가져오기: {count}개 상품")
    return count


def cmd_check(args):
    """평가 1회 실행"""
    app = _create_app(args)
    result = app.scheduler.run_now("manual")
    print(
        f"평가 결과: checked={result.checked}, "
        f"expired={result.status_counts.get('expired', 0)}, "
        f"soon={result.status_counts.get('soon', 0)}, "
        f"alerts={len(result.alerts)}"
    )
    for alert in result.alerts:
        print(f"  [{alert.title}] {alert.body}")
    return result


def main(argv: Optional[List[str]] = None) -> int:
    """CLI 메인 진입점

    Returns:
        종료 코드 (0: 성공, 1: 입력/저장/가져오기 오류)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "add": cmd_add,
        "delete": cmd_delete,
        "list": cmd_list,
        "settings": cmd_settings,
        "export": cmd_export,
        "import": cmd_import,
        "check": cmd_check,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        handler(args)
    except TrackerError as e:
        logger.error(f"{args.command} 실패: {e}")
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
