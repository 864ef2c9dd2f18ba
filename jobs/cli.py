"""CLI del servicio de cálculo OEE sobre el tag store SQL."""

from __future__ import annotations

import argparse
import logging
import time
from dataclasses import replace
from typing import Dict

from common.config import get_settings
from common.db import get_engine
from oee_engine.exceptions import EngineStartupError
from oee_engine.runtime import OEEEngine
from oee_engine.sql_binding import SqlTagBinding, ensure_schema, list_instances, provision_instance

from .simulator import MachineSimulator

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    p = argparse.ArgumentParser(description="OEE calculation engine (tag store runner)")
    p.add_argument("--database-url", default=None, help="override OEE_DATABASE_URL")
    p.add_argument("--interval-ms", type=int, default=None, help="override OEE_UPDATE_INTERVAL_MS")
    p.add_argument("--provision", action="append", default=[], metavar="NAME",
                   help="create tag rows for an instance (repeatable)")
    p.add_argument("--simulate", action="store_true", help="drive inputs with a machine simulator")
    p.add_argument("--once", action="store_true", help="run a single tick and exit")
    args = p.parse_args()

    if args.database_url:
        settings = replace(settings, database_url=args.database_url)
    if args.interval_ms:
        settings = replace(settings, update_interval_ms=args.interval_ms)

    db = get_engine(settings)
    ensure_schema(db)
    for name in args.provision:
        provision_instance(db, name)

    engine = OEEEngine(settings=settings)
    simulators: Dict[str, MachineSimulator] = {}
    for name in list_instances(db):
        binding = SqlTagBinding(db, name)
        try:
            engine.register(name, binding)
        except EngineStartupError as e:
            logger.error("Instancia omitida: %s", e)
            continue
        if args.simulate:
            simulators[name] = MachineSimulator.from_binding(binding, name=name)

    logger.info("OEE engine started")
    logger.info(
        "Config: instances=%d interval_ms=%d simulate=%s",
        len(engine.instance_names),
        settings.update_interval_ms,
        bool(args.simulate),
    )

    if args.once:
        for sim in simulators.values():
            sim.step(settings.update_interval_ms / 1000.0)
        report = engine.run_once()
        logger.info(
            "[OEE_CLI] once processed=%d failed=%d ms=%.1f",
            report.processed,
            report.failed,
            report.elapsed_ms,
        )
        return

    if not engine.start():
        logger.error("Sin instancias registradas, saliendo")
        return

    try:
        last = time.monotonic()
        while engine.is_running:
            time.sleep(engine.interval_seconds())
            now = time.monotonic()
            for sim in simulators.values():
                sim.step(now - last)
            last = now
    except KeyboardInterrupt:
        logger.info("Interrumpido, deteniendo motor...")
    finally:
        engine.stop()


if __name__ == "__main__":
    main()
