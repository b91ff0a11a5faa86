"""PlaceholderEmitter — emit signed placeholder nodes for deferred fragments.

Modes:

- **Single object**: one node carrying ``sgid``, plus ``signed_params``
  when the caller passes a ``data`` namespace.
- **Explicit partial**: one node carrying ``signed_params``.
- **Relation**: one ``sgid`` node per record.
- **Collection**: one ``signed_params`` node per item, each with its own
  ``{name}_counter``; ``broadcast_each`` marks every item node.

The optional content block fills a node's body until the fragment
arrives. ``block=None`` means *no block*, which requests eager loading;
a block returning ``""`` means *intentionally blank* and does not.

INVARIANT: In bypass mode (``unless``) no descriptor or token is built.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from jinja2 import Environment
from markupsafe import Markup

from lazyfrag.domain.attributes import DATA_NAMESPACE, compose_attributes, strip_reserved_data
from lazyfrag.domain.descriptors import (
    Collection,
    EntityDescriptor,
    ExplicitPartial,
    Relation,
    RenderDescriptor,
    RenderTarget,
    SingleObject,
)
from lazyfrag.domain.errors import DescriptorBuildError
from lazyfrag.infrastructure.markup import PlaceholderNode, RenderedFragment, join_markup
from lazyfrag.infrastructure.signing import PURPOSE_CONTROLLER, PURPOSE_SGID
from lazyfrag.services.base import BaseService
from lazyfrag.services.builder import DescriptorBuilder, collection_layout, resolve_target

logger = logging.getLogger(__name__)

ContentBlock = Callable[..., Any]
Node = PlaceholderNode | RenderedFragment


@dataclass(frozen=True)
class EmitOptions:
    """Per-call emission options.

    Attributes:
        extends: Base element the placeholder specializes (``"li"``,
            ``"tr"``); ``None``/``"div"`` uses the autonomous element.
        eager: Fetch immediately instead of waiting for a trigger.
        broadcast_each: Make every collection item addressable on its own.
        unless: Truthy to skip deferral and render eagerly.
        html_options: Caller markup attributes, optionally with ``data``.
        controller: Controller/view context the resolver should render with.
    """

    extends: str | None = None
    eager: bool = False
    broadcast_each: bool = False
    unless: Any = False
    html_options: Mapping[str, Any] | None = None
    controller: str | None = None


def _block_content(value: Any) -> Markup:
    if value is None:
        return Markup("")
    if hasattr(value, "__html__"):
        return Markup(value.__html__())
    return Markup.escape(str(value))


class PlaceholderEmitter(BaseService):
    """Emit placeholder nodes (or eagerly rendered fragments)."""

    def emit(
        self,
        target: RenderTarget,
        options: EmitOptions | None = None,
        block: ContentBlock | None = None,
    ) -> list[Node]:
        """Emit every node for *target*.

        Raises:
            UnidentifiableObjectError: A single-object target has no id.
            DescriptorBuildError: A descriptor could not be built. For
                multi-node targets ``exc.index`` names the failing item and
                ``exc.emitted`` holds the nodes built before it.
        """
        opts = options or EmitOptions()
        if opts.unless or self._kit.settings.rendering.skip_deferral:
            return [self.render_eagerly(target)]

        nodes: list[Node] = []
        try:
            for node in self.iter_nodes(target, opts, block):
                nodes.append(node)
        except DescriptorBuildError as exc:
            exc.emitted = list(nodes)
            raise
        logger.debug("Emitted %d placeholder(s) for %s", len(nodes), type(target).__name__)
        return nodes

    def iter_nodes(
        self,
        target: RenderTarget,
        options: EmitOptions,
        block: ContentBlock | None = None,
    ) -> Iterator[PlaceholderNode]:
        """Yield placeholder nodes lazily, one per rendered item."""
        builder = DescriptorBuilder(self._kit)
        html_options = dict(options.html_options or {})
        raw_data = html_options.get(DATA_NAMESPACE)
        data = strip_reserved_data(raw_data) if isinstance(raw_data, Mapping) else {}
        eager = options.eager or block is None
        tag, is_value = self.element_for(options.extends)
        controller = (
            self._kit.verifier.generate(options.controller, purpose=PURPOSE_CONTROLLER)
            if options.controller
            else None
        )

        def node(descriptor: RenderDescriptor, content: Any, *, broadcast_each: bool) -> PlaceholderNode:
            reserved = {
                **self._token_attributes(descriptor),
                "eager": eager or None,
                "broadcast_each": broadcast_each or None,
                "signed_controller": controller,
                "is": is_value,
            }
            return PlaceholderNode(
                tag=tag,
                attributes=compose_attributes(reserved, html_options),
                content=_block_content(content),
            )

        if isinstance(target, SingleObject):
            descriptor = builder.build(target, data=data)
            yield node(descriptor, block(target.obj) if block else None, broadcast_each=False)
            return
        if isinstance(target, ExplicitPartial):
            descriptor = builder.build(target, data=data)
            content = None
            if block is not None:
                content = block() if target.subject is None else block(target.subject)
            yield node(descriptor, content, broadcast_each=False)
            return

        for built in builder.build_each(target, data=data):
            content = block(built.item, built.index) if block else None
            yield node(built.descriptor, content, broadcast_each=options.broadcast_each)

    def defer(
        self,
        target: Any = None,
        /,
        *,
        partial: str | None = None,
        locals: Mapping[str, Any] | None = None,
        collection: Any = None,
        as_name: str | None = None,
        extends: str | None = None,
        eager: bool = False,
        broadcast_each: bool = False,
        unless: Any = False,
        html_options: Mapping[str, Any] | None = None,
        controller: str | None = None,
        block: ContentBlock | None = None,
        **named_locals: Any,
    ) -> Markup:
        """Emit placeholders for a loose call and return the joined markup.

        Examples::

            emitter.defer(post, extends="li", block=lambda p: p.title)
            emitter.defer("posts/card", post=post, eager=True)
            emitter.defer(post, partial="posts/card", block=lambda p: p.title)
            emitter.defer(collection=posts, broadcast_each=True, block=lambda p, i: "")

        Keyword arguments not listed are locals of the partial.
        """
        resolved = resolve_target(
            target,
            partial=partial,
            locals=locals,
            collection=collection,
            as_name=as_name,
            **named_locals,
        )
        options = EmitOptions(
            extends=extends,
            eager=eager,
            broadcast_each=broadcast_each,
            unless=unless,
            html_options=html_options,
            controller=controller,
        )
        return join_markup(self.emit(resolved, options, block))

    def render_eagerly(self, target: RenderTarget) -> RenderedFragment:
        """Render *target* directly through the rendering collaborator."""
        renderer = self._kit.renderer
        if isinstance(target, SingleObject):
            return RenderedFragment(Markup(renderer.render_entity(target.obj)))
        if isinstance(target, ExplicitPartial):
            return RenderedFragment(Markup(renderer.render_partial(target.partial, target.locals)))

        parts: list[str] = []
        if isinstance(target, Relation):
            parts.extend(str(renderer.render_entity(item)) for item in target.items)
        elif isinstance(target, Collection):
            layout: tuple[str, str] | None = None
            for index, item in enumerate(target.items):
                if layout is None:
                    layout = collection_layout(target, item)
                name, partial = layout
                item_locals = {**target.locals, name: item, f"{name}_counter": index}
                parts.append(str(renderer.render_partial(partial, item_locals)))
        return RenderedFragment(Markup("".join(parts)))

    def element_for(self, extends: str | None) -> tuple[str, str | None]:
        """Return ``(tag, is)`` for the requested base element."""
        rendering = self._kit.settings.rendering
        if extends is None or extends == "div":
            return rendering.element_tag, None
        custom = rendering.extends_elements.get(extends)
        if custom is None:
            logger.debug("No customized element for %r; using %s", extends, rendering.element_tag)
            return rendering.element_tag, None
        return extends, custom

    def _token_attributes(self, descriptor: RenderDescriptor) -> dict[str, str]:
        verifier = self._kit.verifier
        if isinstance(descriptor, EntityDescriptor):
            attributes = {"sgid": verifier.generate(descriptor.entity, purpose=PURPOSE_SGID)}
            if descriptor.data:
                attributes["signed_params"] = verifier.sign_descriptor(descriptor)
            return attributes
        return {"signed_params": verifier.sign_descriptor(descriptor)}


def install_jinja_globals(env: Environment, emitter: PlaceholderEmitter) -> Environment:
    """Expose ``defer`` to templates rendered by *env*.

    Inside a template::

        {{ defer(post, extends="li") }}
        {{ defer("posts/card", post=post, html_options={"class": "card"}) }}
    """
    env.globals["defer"] = emitter.defer
    return env
