"""Loop periódico del motor OEE.

Un único thread daemon procesa todas las instancias registradas de forma
secuencial en cada tick. El sleep entre ticks es un ``Event.wait`` y por
tanto cancelable; un fallo en una instancia se registra y no impide
procesar el resto.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from common.config import Settings, get_settings

from .binding import Binding
from .clock import Clock, SystemClock
from .context import InstanceContext
from .conventions import EdgeCaseConventions
from .exceptions import EngineStartupError
from .metrics import OEE_ENGINE_RUNNING, OEE_INSTANCE_RESULTS, OEE_TICK_LATENCY, OEE_TICKS
from .stats import EngineStats

logger = logging.getLogger(__name__)

MIN_INTERVAL_MS = 50


@dataclass(frozen=True)
class TickReport:
    processed: int
    failed: int
    elapsed_ms: float


class OEEEngine:
    """Motor de cálculo OEE multi-instancia.

    Uso:
        engine = OEEEngine()
        engine.register("Line1", binding)
        engine.start()
        ...
        engine.stop()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        conventions: Optional[EdgeCaseConventions] = None,
        clock: Optional[Clock] = None,
        name: str = "OEEEngine",
    ):
        self.name = name
        self.settings = settings or get_settings()
        self.conventions = conventions or EdgeCaseConventions.from_env()
        self.clock: Clock = clock or SystemClock()
        self.stats = EngineStats()

        self._contexts: Dict[str, InstanceContext] = {}
        self._lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Registro de instancias
    # ------------------------------------------------------------------

    def register(self, instance_name: str, binding: Binding) -> InstanceContext:
        """Resuelve el binding, siembra defaults y lee la configuración.

        Raises:
            EngineStartupError: nombre duplicado o fallo de inicialización
        """
        with self._lock:
            if instance_name in self._contexts:
                raise EngineStartupError(instance_name, "already registered")

        try:
            ctx = InstanceContext(
                instance_name,
                binding,
                conventions=self.conventions,
                config_refresh_ticks=self.settings.config_refresh_ticks,
            )
            ctx.initialize()
        except Exception as e:
            logger.exception("[%s] register_failed instance=%s err=%s", self.name, instance_name, e)
            raise EngineStartupError(instance_name, str(e)) from e

        with self._lock:
            self._contexts[instance_name] = ctx
        logger.info(
            "[%s] registered instance=%s outputs=%d",
            self.name,
            instance_name,
            ctx.bound.bound_outputs,
        )
        return ctx

    def unregister(self, instance_name: str) -> bool:
        with self._lock:
            return self._contexts.pop(instance_name, None) is not None

    def get_context(self, instance_name: str) -> Optional[InstanceContext]:
        with self._lock:
            return self._contexts.get(instance_name)

    @property
    def instance_names(self) -> List[str]:
        with self._lock:
            return list(self._contexts)

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    def interval_seconds(self) -> float:
        """Intervalo entre ticks: el UpdateRateMs más bajo de las instancias o el de settings."""
        with self._lock:
            rates = [c.config.update_rate_ms for c in self._contexts.values() if c.config.update_rate_ms > 0]
        interval_ms = min(rates) if rates else self.settings.update_interval_ms
        return max(MIN_INTERVAL_MS, interval_ms) / 1000.0

    def start(self) -> bool:
        """Arranca el loop. Sin instancias registradas el motor queda inerte."""
        if self.is_running:
            return True

        if self._thread is not None and self._thread.is_alive():
            # El loop anterior sigue terminando su tick tras un stop con timeout
            logger.warning("[%s] start_refused reason=previous_loop_alive", self.name)
            return False

        if not self.instance_names:
            logger.error("[%s] start_aborted reason=no_instances", self.name)
            return False

        # Un Event por ejecución: un loop anterior nunca ve su evento limpiado
        self._stop_event = threading.Event()
        self.stats.reset()
        self._thread = threading.Thread(
            target=self._loop, args=(self._stop_event,), name=self.name, daemon=True
        )
        self._thread.start()
        OEE_ENGINE_RUNNING.set(1)
        logger.info(
            "[%s] Started instances=%d interval_ms=%.0f",
            self.name,
            len(self.instance_names),
            self.interval_seconds() * 1000,
        )
        return True

    def stop(self, timeout: Optional[float] = None) -> None:
        """Cancela el sleep pendiente y espera (acotado) al tick en curso."""
        self._stop_event.set()
        timeout = self.settings.join_timeout_seconds if timeout is None else timeout

        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("[%s] stop_timeout timeout_s=%.2f", self.name, timeout)
            else:
                self._thread = None
        OEE_ENGINE_RUNNING.set(0)

        logger.info("[%s] Stopped. %s", self.name, self.stats)

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                self.run_once()
            except Exception as e:
                # run_once ya aísla errores por instancia; esto cubre fallos del propio tick
                logger.exception("[%s] tick_failed err=%s", self.name, e)
            if stop_event.wait(self.interval_seconds()):
                break

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def run_once(self) -> Optional[TickReport]:
        """Procesa todas las instancias una vez.

        Returns:
            TickReport, o None si otro tick seguía en curso (se omite).
        """
        if not self._tick_lock.acquire(blocking=False):
            self.stats.skipped_ticks += 1
            OEE_TICKS.labels(status="skipped").inc()
            logger.debug("[%s] tick_skipped reason=in_flight", self.name)
            return None

        try:
            start = time.perf_counter()
            now = self.clock.now()
            now_utc = self.clock.utcnow()

            with self._lock:
                contexts = list(self._contexts.values())

            ok = 0
            fail = 0
            for ctx in contexts:
                try:
                    ctx.process_tick(now, now_utc)
                    ok += 1
                    if ctx.last_result is not None:
                        self.stats.writes += ctx.last_result.written
                        self.stats.write_failures += ctx.last_result.failed
                    OEE_INSTANCE_RESULTS.labels(status="success").inc()
                except Exception as e:
                    fail += 1
                    OEE_INSTANCE_RESULTS.labels(status="error").inc()
                    ctx.record_failure(e)
                    logger.exception("[%s] instance_failed instance=%s err=%s", self.name, ctx.name, e)

            elapsed_ms = (time.perf_counter() - start) * 1000
            self.stats.ticks += 1
            self.stats.instances_processed += ok
            self.stats.instance_failures += fail
            self.stats.last_tick_ms = elapsed_ms
            self.stats.last_tick_at = now_utc
            OEE_TICKS.labels(status="completed").inc()
            OEE_TICK_LATENCY.observe(elapsed_ms / 1000.0)

            if fail:
                logger.warning(
                    "[%s] tick ms=%.1f instances=%d ok=%d fail=%d",
                    self.name,
                    elapsed_ms,
                    len(contexts),
                    ok,
                    fail,
                )
            else:
                logger.debug("[%s] tick ms=%.1f instances=%d ok=%d", self.name, elapsed_ms, len(contexts), ok)

            return TickReport(processed=ok, failed=fail, elapsed_ms=elapsed_ms)
        finally:
            self._tick_lock.release()

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            contexts = list(self._contexts.values())
        return [ctx.summary() for ctx in contexts]
