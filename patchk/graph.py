"""
This module renders completeness checks as RDF graphs, so that their results
can be stored, queried or serialized along with other data.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Literal as FormatLiteral
from rdflib import Graph, BNode, Literal
from rdflib.term import Node

from patchk.namespace import PCK, EX, RDF, RDFS, namespaces
from patchk.type import TypeTag, TypeSet
from patchk.signature import Signature

Format = FormatLiteral["ttl", "xml", "nt", "json-ld", "trig"]


class CoverageGraph(Graph):
    """
    A coverage graph describes completeness checks: for every check, the
    interface, its implementations and the leaves that no implementation
    accepts. Signatures are stored as ordered RDF lists of type sets.
    """

    def __init__(self, with_labels: bool = True, *nargs, **kwargs):
        super().__init__(*nargs, **kwargs)
        self.with_labels = with_labels
        self.tag_nodes: dict[TypeTag, Node] = dict()
        self.signature_nodes: dict[Signature, Node] = dict()

        for prefix, ns in namespaces.items():
            self.bind(prefix, ns)

    def add_list(self, items: Iterable[Node]) -> Node:
        if not isinstance(items, list):
            items = list(items)
        if not items:
            return RDF.nil
        node = BNode()
        self.add((node, RDF.first, items[0]))
        self.add((node, RDF.rest, self.add_list(items[1:])))
        return node

    def get_list(self, list_node: Node) -> Iterator[Node]:
        node: Node | None = list_node
        while first := self.value(node, RDF.first, any=False):
            yield first
            node = self.value(node, RDF.rest, any=False)
        if not node == RDF.nil:
            raise RuntimeError("Node is not an RDF list")

    def add_tag(self, tag: TypeTag) -> Node:
        """
        Add a type tag to the graph. Tags that are the same share a node.
        """
        try:
            return self.tag_nodes[tag]
        except KeyError:
            node = self.tag_nodes[tag] = BNode()
            self.add((node, RDF.type, PCK.Tag))
            self.add((node, PCK["name"], Literal(tag.name)))
            if tag.arguments:
                self.add((node, PCK.arguments,
                    self.add_list(self.add_tag(a) for a in tag.arguments)))
            if self.with_labels:
                self.add((node, RDFS.label, Literal(tag.text())))
            return node

    def add_typeset(self, types: TypeSet) -> Node:
        node = BNode()
        self.add((node, RDF.type, PCK.TypeSet))
        for tag in types:
            self.add((node, PCK.member, self.add_tag(tag)))
        return node

    def add_signature(self, signature: Signature) -> Node:
        try:
            return self.signature_nodes[signature]
        except KeyError:
            node = self.signature_nodes[signature] = BNode()
            self.add((node, RDF.type, PCK.Signature))
            self.add((node, PCK.parameters,
                self.add_list(self.add_typeset(p) for p in signature)))
            if self.with_labels:
                self.add((node, RDFS.label, Literal(signature.text())))
            return node

    def add_check(self, interface: Signature,
            implementations: Iterable[Signature],
            leaves: Iterable[Signature],
            name: str | None = None) -> Node:
        """
        Add the outcome of a completeness check. Return the node of the check.
        """
        root = EX[name] if name else BNode()
        leaves = list(leaves)

        self.add((root, RDF.type, PCK.Check))
        self.add((root, PCK.interface, self.add_signature(interface)))
        for i in implementations:
            self.add((root, PCK.implementation, self.add_signature(i)))
        for leaf in leaves:
            self.add((root, PCK.leaf, self.add_signature(leaf)))
        self.add((root, PCK.complete, Literal(not leaves)))
        if self.with_labels and name:
            self.add((root, RDFS.label, Literal(name)))
        return root

    def tag(self, node: Node) -> TypeTag:
        name = self.value(node, PCK["name"], any=False)
        if name is None:
            raise RuntimeError(f"Node {node} is not a type tag")
        args = self.value(node, PCK.arguments, any=False)
        return TypeTag(str(name),
            *(self.tag(a) for a in self.get_list(args))) \
            if args else TypeTag(str(name))

    def typeset(self, node: Node) -> TypeSet:
        return TypeSet(self.tag(t) for t in self.objects(node, PCK.member))

    def signature(self, node: Node) -> Signature:
        """
        Read back a signature that was added to the graph.
        """
        params = self.value(node, PCK.parameters, any=False)
        if params is None:
            raise RuntimeError(f"Node {node} is not a signature")
        return Signature(*(self.typeset(p) for p in self.get_list(params)))

    def checks(self) -> Iterator[Node]:
        return self.subjects(RDF.type, PCK.Check)

    def leaves(self, check: Node) -> set[Signature]:
        return set(self.signature(s) for s in self.objects(check, PCK.leaf))

    def write(self, format: Format = "ttl") -> str:
        result = self.serialize(format=format)
        assert isinstance(result, str)
        return result
