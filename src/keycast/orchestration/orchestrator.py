"""
Application orchestrator.

Builds the devices, the binding store and the pipeline from a loaded
configuration, and owns their lifecycle (initialize, start, run, shutdown).
"""

import logging
import threading
from pathlib import Path
from typing import Optional

from keycast.broadcast import Broadcaster
from keycast.devices import DeviceRegistry, MidiDevice, MidiOutputDevice, PulseDevice
from keycast.engine import (
    BindingStore,
    Evaluator,
    FeedbackController,
    Mapper,
    Pipeline,
    Router,
    Shaper,
    script_name,
)
from keycast.exceptions import ErrorCollector, ErrorContext, collect_errors
from keycast.model_manager import YamlPersistence
from keycast.models import RouterConfig, Target, TargetProtocol

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Top-level coordinator for keycast.

    Architecture:
        Orchestrator (this class)
        ├── Config: RouterConfig (frozen) + BindingStore (live state)
        ├── Devices: DeviceRegistry (controllers, pulses, MIDI outputs)
        └── Engine: Evaluator → Shaper → Mapper → Router → FeedbackController
                    driven by Pipeline
    """

    def __init__(
        self,
        config: RouterConfig,
        config_path: Optional[Path] = None,
        broadcaster: Optional[Broadcaster] = None,
        registry: Optional[DeviceRegistry] = None,
        poll_interval: float = 2.0,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Loaded configuration
            config_path: File the configuration came from, used by ``save``
            broadcaster: Broadcaster to use (a stdout/OSC/UDP one by default)
            registry: Prepared device registry; when None, devices are built from the config
            poll_interval: MIDI hot-plug polling interval in seconds
        """
        self.config = config
        self.config_path = config_path
        self.broadcaster = broadcaster or Broadcaster()
        self.poll_interval = poll_interval

        self._build_devices = registry is None
        self.registry = registry if registry is not None else DeviceRegistry()

        self.store: Optional[BindingStore] = None
        self.evaluator: Optional[Evaluator] = None
        self.router: Optional[Router] = None
        self.feedback: Optional[FeedbackController] = None
        self.mapper: Optional[Mapper] = None
        self.shaper: Optional[Shaper] = None
        self.pipeline: Optional[Pipeline] = None

        self._started = False
        self._stop_event = threading.Event()

    @classmethod
    def from_file(cls, path: Path, **kwargs) -> "Orchestrator":
        """
        Load a configuration file and create an orchestrator for it.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigurationError: If the file is invalid
        """
        config = YamlPersistence.load_yaml(path, RouterConfig)
        logger.info(f"Loaded configuration from {path}")
        return cls(config, config_path=path, **kwargs)

    def initialize(self) -> ErrorCollector:
        """
        Build the engine and compile shape scripts.

        Returns:
            Collector holding any script compile errors; bindings whose
            script failed to compile run without one
        """
        logger.info("Initializing orchestrator")

        self.store = BindingStore.from_config(self.config)
        self.evaluator = Evaluator(dict(self.config.globals_))

        if self._build_devices:
            self._create_devices()

        self.router = Router(self.broadcaster, self.config.targets, self.registry, self.store)
        self.feedback = FeedbackController(self.registry)
        self.router.register_observer(self.feedback)
        self.mapper = Mapper(self.router)
        self.shaper = Shaper(self.evaluator, self.store, self.mapper, self.feedback, self.registry)
        self.pipeline = Pipeline(self.store, self.shaper, self.mapper)

        collector = self.compile_scripts()
        if collector.has_errors:
            logger.warning(collector.get_summary())

        logger.info(
            f"Orchestrator initialized: {len(self.store.devices)} source(s), "
            f"{len(self.config.targets)} default target(s), {len(self.evaluator)} script(s)"
        )
        return collector

    def compile_scripts(self) -> ErrorCollector:
        """Register every binding's shape script with the evaluator."""
        collector = collect_errors("compile shape scripts")
        for binding in self.store:
            if not binding.spec.shape:
                continue
            with collector.try_operation(script_name(binding.device, binding)):
                self.shaper.register(binding)
        return collector

    def start(self) -> None:
        """Open devices, start the pipeline and send initial values."""
        if self._started:
            logger.warning("Orchestrator already started")
            return
        if self.pipeline is None:
            self.initialize()

        try:
            with ErrorContext("start devices", logger):
                self.pipeline.start()
                self.registry.start_all(self.pipeline.submit)
        except Exception:
            self.pipeline.stop()
            self.registry.stop_all()
            raise

        for device in self.store.devices:
            self.router.route_initial(device)

        self._started = True
        self._stop_event.clear()
        logger.info("Orchestrator started")

    def run(self) -> None:
        """Start and block until ``shutdown`` is called or the process is interrupted."""
        self.start()
        try:
            while not self._stop_event.wait(0.5):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Stop the pipeline and every device."""
        self._stop_event.set()
        if not self._started:
            return

        logger.info("Shutting down orchestrator")
        if self.pipeline:
            self.pipeline.stop()
        self.registry.stop_all()
        self.broadcaster.close()
        self._started = False

    def save(self, path: Optional[Path] = None) -> Path:
        """
        Write the configuration back, with each binding's live value as its ``value``.

        Args:
            path: Destination, defaults to the file the configuration was loaded from

        Returns:
            The path written
        """
        path = path or self.config_path
        if path is None:
            raise ValueError("No path to save configuration to")
        if self.store is None:
            raise RuntimeError("Orchestrator not initialized")

        YamlPersistence.save_yaml(self.store.export_config(self.config), path)
        logger.info(f"Saved configuration to {path}")
        return path

    @property
    def is_running(self) -> bool:
        return self._started

    def midi_targets(self) -> list[Target]:
        """Distinct MIDI targets named anywhere in the configuration."""
        targets = list(self.config.targets)
        for specs in self.config.inputs.values():
            for spec in specs:
                targets.extend(spec.targets or [])
        for pulse in self.config.pulses:
            targets.extend(pulse.targets or [])

        seen: dict[str, Target] = {}
        for target in targets:
            if target.protocol == TargetProtocol.MIDI and target.address not in seen:
                seen[target.address] = target
        return list(seen.values())

    def _create_devices(self) -> None:
        for name in self.config.inputs:
            self.registry.add(MidiDevice(name, self.poll_interval))
        for pulse in self.config.pulses:
            self.registry.add(PulseDevice(pulse.name, pulse.period))
        for target in self.midi_targets():
            self.registry.add(MidiOutputDevice(target.address, self.poll_interval))
