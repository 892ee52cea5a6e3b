"""Main entry point: rate workbook imports and quote pricing."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote_plus

from tourpricing.config import configure_logging, get_logger, settings
from tourpricing.services import (
    HotelPricingImportOrchestrator,
    InMemoryRateCatalog,
    PricingCalculator,
    PricingInputError,
)

logger = get_logger(__name__)


def _load_catalog(path: Optional[str]) -> InMemoryRateCatalog:
    catalog_path = path or settings.catalog_path
    if not catalog_path:
        raise ValueError("A rate catalog is required (--catalog or CATALOG_PATH)")
    return InMemoryRateCatalog.from_json(catalog_path)


async def run_quote(request: dict[str, Any], catalog: InMemoryRateCatalog) -> dict[str, Any]:
    """Price a quote request.

    The request is camelCase JSON with tourStartsFrom, tourEndsOn, markup,
    includeNames and either itineraries (with rooms/vehicles per day) or a
    variantId plus variantRoomAllocations/variantTransportDetails over a
    shared itinerary skeleton.
    """
    calculator = PricingCalculator(catalog)
    if request.get("variantId"):
        result = await calculator.calculate_variant_pricing(
            variant_id=request["variantId"],
            variant_room_allocations=request.get("variantRoomAllocations"),
            variant_transport_details=request.get("variantTransportDetails"),
            itineraries=request.get("itineraries") or [],
            tour_starts_from=request.get("tourStartsFrom"),
            tour_ends_on=request.get("tourEndsOn"),
            markup=request.get("markup"),
            include_names=request.get("includeNames", True),
        )
    else:
        result = await calculator.calculate_pricing(
            tour_starts_from=request.get("tourStartsFrom"),
            tour_ends_on=request.get("tourEndsOn"),
            itineraries=request.get("itineraries") or [],
            markup=request.get("markup"),
            include_names=request.get("includeNames"),
        )
    return result.to_response_dict()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tourpricing",
        description="Hotel rate workbook imports and tour quote pricing",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Validate a hotel rate workbook")
    import_parser.add_argument("source", help="Workbook path or s3://bucket/key")
    import_parser.add_argument("--catalog", help="Rate catalog JSON (defaults to CATALOG_PATH)")

    quote_parser = subparsers.add_parser("quote", help="Price a quote request")
    quote_parser.add_argument("request", help="Quote request JSON file")
    quote_parser.add_argument("--catalog", help="Rate catalog JSON (defaults to CATALOG_PATH)")

    return parser


async def main(argv: Optional[list[str]] = None) -> int:
    """Run one CLI command and print its JSON result.

    Returns:
        0 on success, 1 on failure
    """
    args = _build_parser().parse_args(argv)

    logger.info(
        "Starting tourpricing",
        environment=settings.environment,
        command=args.command,
    )

    try:
        catalog = _load_catalog(args.catalog)

        if args.command == "import":
            results = await HotelPricingImportOrchestrator().run_import(args.source, catalog)
            print(json.dumps(results, indent=2, default=str))
            return 0 if results["success"] else 1

        request = json.loads(Path(args.request).read_text(encoding="utf-8"))
        print(json.dumps(await run_quote(request, catalog), indent=2, default=str))
        return 0

    except (PricingInputError, ValueError, OSError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(json.dumps({"success": False, "error": str(e)}))
        return 1
    except Exception as e:
        logger.error(
            "Fatal error in main application",
            error=str(e),
            exc_info=True,
        )
        return 1


def run_sync() -> int:
    """Run the async main function synchronously.

    Returns:
        Exit code from main()
    """
    configure_logging()
    return asyncio.run(main())


def _s3_sources(event: dict[str, Any]) -> list[str]:
    sources = []
    for record in event.get("Records", []):
        s3 = record.get("s3") or {}
        bucket = (s3.get("bucket") or {}).get("name")
        key = (s3.get("object") or {}).get("key")
        if bucket and key:
            sources.append(f"s3://{bucket}/{unquote_plus(key)}")
    if event.get("source"):
        sources.append(event["source"])
    return sources


async def _import_all(sources: list[str]) -> list[dict[str, Any]]:
    catalog = _load_catalog(None)
    orchestrator = HotelPricingImportOrchestrator()
    return [await orchestrator.run_import(source, catalog) for source in sources]


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """AWS Lambda handler for workbook uploads.

    Accepts S3 put notifications (Records[].s3) or {"source": "s3://..."}.

    Args:
        event: Lambda event
        context: Lambda context

    Returns:
        Lambda response dictionary
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Lambda invoked",
        environment=settings.environment,
        request_id=request_id,
    )

    sources = _s3_sources(event)
    if not sources:
        logger.warning("Lambda event has no workbook source", request_id=request_id)
        return {
            "statusCode": 400,
            "body": json.dumps({"error": "No workbook source in event", "request_id": request_id}),
        }

    try:
        results = asyncio.run(_import_all(sources))
        success = all(result["success"] for result in results)

        logger.info(
            "Lambda execution complete",
            request_id=request_id,
            success=success,
            imports=len(results),
        )

        return {
            "statusCode": 200 if success else 400,
            "body": json.dumps(results, default=str),
        }

    except Exception as e:
        logger.error(
            "Lambda execution failed",
            request_id=request_id,
            error=str(e),
            exc_info=True,
        )

        return {
            "statusCode": 500,
            "body": json.dumps(
                {
                    "error": str(e),
                    "request_id": request_id,
                }
            ),
        }


if __name__ == "__main__":
    sys.exit(run_sync())
