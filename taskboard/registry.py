"""Service lifecycle registry.

Services are registered by name with a factory, a lifetime and an explicit
list of the names they depend on. Singletons are built once at startup in
dependency order and torn down in exactly the reverse order at shutdown.

Usage:
    registry = ServiceRegistry()
    registry.singleton("config", lambda: settings)
    registry.singleton(
        "database",
        lambda config: DatabaseService(config.DATABASE_URL),
        dependencies=["config"],
    )
    await registry.start()
    ...
    await registry.stop(timeout=15)

A factory receives its dependencies as keyword arguments named after them.
An instance may expose ``initialize()``, ``destroy()`` and ``health_check()``
(plain or async); they are called at the matching point of the lifecycle.
"""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

Hook = Callable[[Any], Any]


class Lifetime(str, enum.Enum):
    SINGLETON = "SINGLETON"
    SCOPED = "SCOPED"
    TRANSIENT = "TRANSIENT"


class ServiceState(str, enum.Enum):
    REGISTERED = "registered"
    INSTANTIATED = "instantiated"
    INITIALIZED = "initialized"
    DESTROYED = "destroyed"


class ServiceRegistryError(RuntimeError):
    """Raised for registration, resolution and startup failures."""


class CircularDependencyError(ServiceRegistryError):
    pass


@dataclass
class ServiceDescriptor:
    name: str
    factory: Callable[..., Any]
    lifetime: Lifetime
    dependencies: List[str] = field(default_factory=list)
    initializer: Optional[Hook] = None
    disposer: Optional[Hook] = None
    health_check: Optional[Hook] = None
    state: ServiceState = ServiceState.REGISTERED


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _call_method(instance: Any, method_name: str) -> Any:
    method = getattr(instance, method_name, None)
    if callable(method):
        return await _maybe_await(method())
    return None


class ServiceScope:
    """Per-unit-of-work cache for scoped services."""

    def __init__(self, registry: "ServiceRegistry"):
        self._registry = registry
        self._instances: Dict[str, Any] = {}

    def resolve(self, name: str) -> Any:
        return self._registry.resolve(name, scope=self)

    def _get_or_create(self, descriptor: ServiceDescriptor) -> Any:
        if descriptor.name not in self._instances:
            self._instances[descriptor.name] = self._registry._build(descriptor, scope=self)
        return self._instances[descriptor.name]


class ServiceRegistry:
    def __init__(self) -> None:
        self._services: Dict[str, ServiceDescriptor] = {}
        self._instances: Dict[str, Any] = {}
        self._initialization_order: List[str] = []
        self._initialized = False

    # Registration

    def register(
        self,
        name: str,
        factory: Callable[..., Any],
        lifetime: Lifetime = Lifetime.SINGLETON,
        *,
        dependencies: Iterable[str] = (),
        initializer: Optional[Hook] = None,
        disposer: Optional[Hook] = None,
        health_check: Optional[Hook] = None,
    ) -> "ServiceRegistry":
        lifetime = Lifetime(lifetime)
        if lifetime is not Lifetime.SINGLETON and (initializer or disposer or health_check):
            raise ServiceRegistryError(
                f"Lifecycle hooks are only supported for singletons (service '{name}')"
            )
        if self._initialized:
            raise ServiceRegistryError(f"Cannot register '{name}' after services were initialized")

        self._services[name] = ServiceDescriptor(
            name=name,
            factory=factory,
            lifetime=lifetime,
            dependencies=list(dependencies),
            initializer=initializer,
            disposer=disposer,
            health_check=health_check,
        )
        return self

    def singleton(self, name: str, factory: Callable[..., Any], **options: Any) -> "ServiceRegistry":
        return self.register(name, factory, Lifetime.SINGLETON, **options)

    def scoped(self, name: str, factory: Callable[..., Any], dependencies: Iterable[str] = ()) -> "ServiceRegistry":
        return self.register(name, factory, Lifetime.SCOPED, dependencies=dependencies)

    def transient(self, name: str, factory: Callable[..., Any], dependencies: Iterable[str] = ()) -> "ServiceRegistry":
        return self.register(name, factory, Lifetime.TRANSIENT, dependencies=dependencies)

    def has(self, name: str) -> bool:
        return name in self._services

    @property
    def registered_services(self) -> List[str]:
        return list(self._services)

    @property
    def initialization_order(self) -> List[str]:
        return list(self._initialization_order)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def service_info(self, name: str) -> Optional[ServiceDescriptor]:
        return self._services.get(name)

    def get_instance(self, name: str) -> Any:
        """Return a live singleton instance, or None when it is not running."""
        return self._instances.get(name)

    # Ordering

    def startup_order(self) -> List[str]:
        """Depth-first topological order of the singleton services."""
        visited: set = set()
        visiting: set = set()
        order: List[str] = []

        def visit(name: str, path: List[str]) -> None:
            if name in visiting:
                cycle = " -> ".join(path[path.index(name):] + [name])
                raise CircularDependencyError(f"Circular dependency detected: {cycle}")
            if name in visited:
                return

            visiting.add(name)
            for dependency in self._services[name].dependencies:
                if dependency not in self._services:
                    raise ServiceRegistryError(
                        f"Service '{name}' depends on unregistered service '{dependency}'"
                    )
                if self._services[dependency].lifetime is Lifetime.SINGLETON:
                    visit(dependency, path + [name])
            visiting.discard(name)
            visited.add(name)
            order.append(name)

        for descriptor in self._services.values():
            if descriptor.lifetime is Lifetime.SINGLETON:
                visit(descriptor.name, [])
        return order

    # Resolution

    def resolve(self, name: str, scope: Optional[ServiceScope] = None) -> Any:
        descriptor = self._services.get(name)
        if descriptor is None:
            raise ServiceRegistryError(f"Service '{name}' is not registered")

        if descriptor.lifetime is Lifetime.SINGLETON:
            if name not in self._instances:
                raise ServiceRegistryError(f"Singleton '{name}' has not been initialized")
            return self._instances[name]
        if descriptor.lifetime is Lifetime.SCOPED:
            if scope is None:
                raise ServiceRegistryError(f"Scoped service '{name}' must be resolved from a scope")
            return scope._get_or_create(descriptor)
        return self._build(descriptor, scope=scope)

    def create_scope(self) -> ServiceScope:
        return ServiceScope(self)

    def _build(self, descriptor: ServiceDescriptor, scope: Optional[ServiceScope] = None) -> Any:
        kwargs = {dependency: self.resolve(dependency, scope=scope) for dependency in descriptor.dependencies}
        try:
            return descriptor.factory(**kwargs)
        except Exception as exc:
            raise ServiceRegistryError(f"Failed to resolve service '{descriptor.name}': {exc}") from exc

    # Lifecycle

    async def start(self) -> None:
        try:
            await self.initialize_all()
        except Exception:
            logger.error("Failed to start service registry")
            raise

    async def initialize_all(self) -> None:
        if self._initialized:
            logger.warning("Services already initialized, skipping...")
            return

        logger.info("Initializing services...")
        # Computed up front so a cycle fails before anything is built
        order = self.startup_order()

        try:
            for name in order:
                await self._initialize_service(name)
                self._initialization_order.append(name)
        except Exception:
            logger.exception("Failed to initialize services")
            await self.destroy_all()
            raise

        self._initialized = True
        logger.info("Initialized %d services: %s", len(order), ", ".join(order))

    async def _initialize_service(self, name: str) -> None:
        descriptor = self._services[name]
        try:
            instance = self._build(descriptor)
            self._instances[name] = instance
            descriptor.state = ServiceState.INSTANTIATED

            if descriptor.initializer is not None:
                await _maybe_await(descriptor.initializer(instance))
            await _call_method(instance, "initialize")
            descriptor.state = ServiceState.INITIALIZED
        except Exception as exc:
            if name in self._instances and name not in self._initialization_order:
                # Partially built; still torn down with the rest
                self._initialization_order.append(name)
            raise ServiceRegistryError(f"Failed to initialize service '{name}': {exc}") from exc
        logger.debug("Service '%s' initialized", name)

    async def destroy_all(self) -> None:
        if not self._initialization_order:
            return

        logger.info("Destroying services...")
        for name in reversed(list(self._initialization_order)):
            await self._destroy_service(name)
            self._initialization_order.remove(name)

        self._instances.clear()
        self._initialized = False
        logger.info("All services destroyed")

    async def _destroy_service(self, name: str) -> None:
        instance = self._instances.get(name)
        if instance is None:
            return

        descriptor = self._services[name]
        try:
            if descriptor.disposer is not None:
                await _maybe_await(descriptor.disposer(instance))
            await _call_method(instance, "destroy")
        except Exception:
            # Teardown continues with the remaining services
            logger.exception("Failed to destroy service '%s'", name)
        finally:
            self._instances.pop(name, None)
            descriptor.state = ServiceState.DESTROYED

    async def stop(self, timeout: Optional[float] = None) -> None:
        logger.info("Stopping service registry...")
        try:
            await asyncio.wait_for(self.destroy_all(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Service shutdown timed out after %ss; abandoning: %s",
                timeout,
                ", ".join(reversed(self._initialization_order)) or "-",
            )
            return
        logger.info("Service registry stopped successfully")

    # Health

    async def health_check(self) -> Dict[str, bool]:
        results: Dict[str, bool] = {}
        for name, descriptor in self._services.items():
            if descriptor.lifetime is not Lifetime.SINGLETON:
                continue

            instance = self._instances.get(name)
            if instance is None:
                results[name] = False
                continue

            try:
                if descriptor.health_check is not None:
                    healthy = await _maybe_await(descriptor.health_check(instance))
                elif callable(getattr(instance, "health_check", None)):
                    healthy = await _call_method(instance, "health_check")
                else:
                    healthy = True
                results[name] = bool(healthy)
            except Exception:
                logger.exception("Health check failed for service '%s'", name)
                results[name] = False
        return results

    async def is_healthy(self) -> bool:
        results = await self.health_check()
        return all(results.values())

    def stats(self) -> Dict[str, Any]:
        lifetimes = [descriptor.lifetime for descriptor in self._services.values()]
        return {
            "total_services": len(self._services),
            "initialized_services": len(self._instances),
            "singleton_services": lifetimes.count(Lifetime.SINGLETON),
            "scoped_services": lifetimes.count(Lifetime.SCOPED),
            "transient_services": lifetimes.count(Lifetime.TRANSIENT),
            "initialization_order": list(self._initialization_order),
        }
