"""Text rendering of claim values and statements.

stringify() turns the open-ended value payloads of the textifier service into
a single line of text. It dispatches on the shape of the value in a fixed
order and always has a fallback, so it never raises:

    None                        -> ""
    {"values": [...]}           -> each element's "value", joined with ", "
    {"value": x}                -> stringify(x)
    {"string": x}               -> stringify(x)
    {"QID": id, "label": l}     -> "l (id)", or "id" when the label is blank
    {"PID": id, "label": l}     -> same, for properties
    {"amount": a, "unit": u}    -> "a u" (unit omitted when blank)
    any other mapping           -> "k1=v1, k2=v2" with keys sorted
    str                         -> unchanged
    bool                        -> "true" / "false"
    list / tuple                -> elements joined with ", "
    anything else               -> str(value)

triplet_values_to_string() renders every value of a statement as a block:

    Douglas Adams (Q42): occupation (P106): novelist (Q6625963)
      Rank: normal
      Qualifier:
        - start time (P580): 1979
      Reference 1:
        - stated in (P248): Encyclopaedia Britannica (Q455)
"""

from typing import Any, Mapping

from wdgraph.models import Entity, Qualifier


def _entity_reference(value: Mapping[str, Any], key: str) -> str | None:
    """Render {"QID"/"PID": id, "label": ...} or return None if ``key`` is blank."""
    entity_id = value.get(key)
    if not isinstance(entity_id, str) or not entity_id.strip():
        return None
    label = value.get("label")
    if not isinstance(label, str) or not label.strip():
        return entity_id
    return f"{label} ({entity_id})"


def _stringify_mapping(value: Mapping[str, Any]) -> str:
    items = value.get("values")
    if isinstance(items, (list, tuple)):
        return ", ".join(stringify(item.get("value") if isinstance(item, Mapping) else None) for item in items)
    if "value" in value:
        return stringify(value["value"])
    if "string" in value:
        return stringify(value["string"])

    for key in ("QID", "PID"):
        reference = _entity_reference(value, key)
        if reference is not None:
            return reference

    if "amount" in value:
        text = stringify(value["amount"])
        unit = value.get("unit")
        if isinstance(unit, str) and unit.strip():
            text = f"{text} {unit}"
        return text.strip()

    # Unknown shape: stable key order keeps the output deterministic
    return ", ".join(f"{key}={stringify(value[key])}" for key in sorted(value, key=str))


def stringify(value: Any) -> str:
    """Render a claim, qualifier or reference value as text."""
    if value is None:
        return ""
    if isinstance(value, Mapping):
        return _stringify_mapping(value)
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(stringify(item) for item in value)
    return str(value)


def stringify_qualifier(qualifier: Qualifier) -> str:
    """Join all values of a qualifier or reference entry with ", "."""
    return ", ".join(stringify(v.value) for v in qualifier.values)


def _property_line(qualifier: Qualifier) -> str:
    return f"    - {qualifier.property_label} ({qualifier.pid}): {stringify_qualifier(qualifier)}"


def triplet_values_to_string(entity_id: str, property_id: str, entity: Entity) -> str:
    """Render every value of every claim of ``entity`` as text blocks.

    Blocks are separated by a blank line. A claim without a PID is labelled
    with the requested ``property_id``. Returns "" if the entity has no claims.
    """
    if not entity.claims:
        return ""

    entity_label = entity.label.strip() or entity_id
    blocks: list[str] = []
    for claim in entity.claims:
        prop = claim.pid.strip() or property_id
        for claim_value in claim.values:
            lines = [
                f"{entity_label} ({entity_id}): {claim.property_label} ({prop}): {stringify(claim_value.value)}",
                f"  Rank: {claim_value.rank.strip() or 'normal'}",
            ]
            if claim_value.qualifiers:
                lines.append("  Qualifier:")
                lines.extend(_property_line(q) for q in claim_value.qualifiers)
            for index, reference in enumerate(claim_value.references, start=1):
                lines.append(f"  Reference {index}:")
                lines.extend(_property_line(entry) for entry in reference)
            blocks.append("\n".join(lines))

    return "\n\n".join(blocks).strip()
