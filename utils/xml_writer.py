import xml.etree.ElementTree as ET
from xml.dom import minidom
from dataclasses import asdict

from models import SimulationInputs

# Field order per group, mirroring config/default_scenario.xml
SCENARIO_LAYOUT = {
    "income": ["annual_income", "filing_mode", "contributes_to_inss"],
    "contribution": ["wrapper", "contribution_pct", "regime"],
    "investment": ["expected_return", "horizon_years", "capital_gains_tax", "refund_delay_years"],
    "fees": ["admin_fee_pct", "performance_fee_pct", "fees_enabled"],
}


def prettify_xml(elem):
    """Return a pretty-printed XML string for an Element."""
    rough_string = ET.tostring(elem, 'utf-8')
    reparsed = minidom.parseString(rough_string)
    # Return the XML declaration and the pretty-printed content
    return reparsed.toprettyxml(indent="    ")


def create_scenario_xml(inputs: SimulationInputs) -> str:
    """
    Converts a SimulationInputs back into the grouped scenario XML layout
    read by utils.xml_loader.parse_scenario_xml.
    """
    values = asdict(inputs)

    # Create the root element
    root = ET.Element('scenario')

    for group, field_names in SCENARIO_LAYOUT.items():
        group_elem = ET.SubElement(root, group)
        for name in field_names:
            value = values[name]
            if isinstance(value, bool):
                # try_cast expects lowercase booleans
                text = "true" if value else "false"
            else:
                text = str(value)
            ET.SubElement(group_elem, name).text = text

    # Convert the root element tree to a prettified XML string
    return prettify_xml(root)
