"""Static regulatory boilerplate for the tariff document, kept as data.

Each :class:`SectionDefinition` is a numbered tariff item whose blocks are
fixed text.  Text may contain ``{company_name}``, ``{mc_number}``,
``{usdot_number}``, ``{territory}`` and ``{issuer_name}`` placeholders, which
the assembler fills per carrier.  Nothing in this module depends on rates.
"""

from pydantic import BaseModel, ConfigDict

from tariff.document.blocks import ContentBlock, Heading, Paragraph, ParagraphStyle


class SectionDefinition(BaseModel):
    """A numbered tariff item with fixed content."""

    model_config = ConfigDict(frozen=True)

    item: str
    title: str
    blocks: tuple[ContentBlock, ...] = ()


def _p(text: str) -> Paragraph:
    return Paragraph(text=text)


def _bullets(*lines: str) -> tuple[Paragraph, ...]:
    return tuple(Paragraph(text=line, style=ParagraphStyle.BULLET) for line in lines)


def _sub(text: str) -> Heading:
    return Heading(text=text, level=2)


# Table of contents: every item in publication order
TABLE_OF_CONTENTS: tuple[tuple[str, str], ...] = (
    ("100", "APPLICATION OF TARIFF"),
    ("110", "DEFINITIONS"),
    ("200", "SCOPE OF OPERATIONS"),
    ("300", "RATES AND CHARGES"),
    ("310", "TRANSPORTATION RATES"),
    ("320", "ORIGIN & DEST. SERVICES"),
    ("330", "MINIMUM CHARGES"),
    ("400", "ACCESSORIAL SERVICES"),
    ("410", "PACKING AND UNPACKING"),
    ("420", "STORAGE IN TRANSIT"),
    ("430", "EXTRA LABOR CHARGES"),
    ("440", "SPECIAL SERVICES"),
    ("500", "VALUATION AND LIABILITY"),
    ("510", "RELEASED VALUE"),
    ("520", "FULL VALUE PROTECTION"),
    ("600", "CLAIMS PROCEDURES"),
    ("700", "PAYMENT TERMS"),
    ("800", "CUSTOMER DISCLOSURES"),
    ("900", "GENERAL RULES"),
)

TERRITORY_DESCRIPTIONS: dict[str, str] = {
    "Nationwide (All 50 States)": (
        "This carrier is authorized to provide transportation services for household goods "
        "between all points in the 48 contiguous United States, Alaska, Hawaii, and the "
        "District of Columbia."
    ),
    "Regional - Northeast": (
        "This carrier is authorized to provide transportation services for household goods "
        "between points in the Northeastern United States, including Connecticut, Delaware, "
        "Maine, Maryland, Massachusetts, New Hampshire, New Jersey, New York, Pennsylvania, "
        "Rhode Island, Vermont, and the District of Columbia."
    ),
    "Regional - Southeast": (
        "This carrier is authorized to provide transportation services for household goods "
        "between points in the Southeastern United States, including Alabama, Arkansas, "
        "Florida, Georgia, Kentucky, Louisiana, Mississippi, North Carolina, South Carolina, "
        "Tennessee, Virginia, and West Virginia."
    ),
    "Regional - Midwest": (
        "This carrier is authorized to provide transportation services for household goods "
        "between points in the Midwestern United States, including Illinois, Indiana, Iowa, "
        "Kansas, Michigan, Minnesota, Missouri, Nebraska, North Dakota, Ohio, South Dakota, "
        "and Wisconsin."
    ),
    "Regional - Southwest": (
        "This carrier is authorized to provide transportation services for household goods "
        "between points in the Southwestern United States, including Arizona, New Mexico, "
        "Oklahoma, and Texas."
    ),
    "Regional - West": (
        "This carrier is authorized to provide transportation services for household goods "
        "between points in the Western United States, including California, Colorado, Idaho, "
        "Montana, Nevada, Oregon, Utah, Washington, and Wyoming."
    ),
    "Custom Territory": (
        "This carrier operates within a custom service territory as defined by operating "
        "authority. Contact carrier for specific service area details."
    ),
}

DEFINITIONS: tuple[tuple[str, str], ...] = (
    ("Bill of Lading", "The receipt for goods and the contract for their transportation, "
     "containing terms and conditions of the agreement between the shipper and the carrier."),
    ("Carrier", "The motor carrier named on the title page of this tariff, including its "
     "agents and employees."),
    ("Consignee", "The person or entity to whom the shipment is to be delivered."),
    ("Consignor/Shipper", "The person or entity from whom the shipment originates and who "
     "enters into the contract of carriage with the carrier."),
    ("Household Goods", "Personal effects and property used or to be used in a dwelling, "
     "including furniture, fixtures, equipment, and the property of family members."),
    ("Interstate Commerce", "Transportation of property between a point in one state and a "
     "point in another state, or between points within a state through another state."),
    ("Line Haul", "The transportation charges assessed for moving a shipment from origin to "
     "destination, exclusive of accessorial charges."),
    ("Order for Service", "A document authorizing the carrier to perform transportation "
     "services as specified therein."),
    ("Released Value", "The maximum amount of carrier liability for loss or damage as "
     "declared by the shipper."),
    ("Shipment", "The household goods tendered by one shipper at one time, from one origin "
     "point, to one destination."),
    ("Tariff", "This publication containing the rules, regulations, rates, and charges "
     "applicable to the transportation of household goods."),
    ("Weight Ticket", "An official document showing the weight of the shipment as "
     "determined by certified scales."),
)

APPLICATION = SectionDefinition(
    item="100",
    title="APPLICATION OF TARIFF",
    blocks=(
        _p("This tariff contains the rules, regulations, rates, and charges for the "
           "transportation of household goods by motor vehicle, as defined herein, between "
           "points in the United States."),
        _p("This tariff applies to transportation services provided by {company_name} "
           "(MC {mc_number}, USDOT {usdot_number}) and is published in accordance with the "
           "requirements of 49 U.S.C. § 13702 and 49 CFR Part 1310."),
        _sub("A. Governing Publications"),
        _p("This tariff is governed by and subject to all applicable federal regulations, "
           "including but not limited to:"),
        *_bullets(
            "49 CFR Part 375 - Transportation of Household Goods in Interstate Commerce",
            "49 CFR Part 371 - Brokers of Property",
            "49 CFR Part 387 - Minimum Levels of Financial Responsibility",
            "49 CFR Part 1310 - Tariff Requirements",
        ),
        _sub("B. Amendments"),
        _p("This tariff may be amended, changed, or modified by the carrier at any time. "
           "Amended provisions shall be effective upon publication unless otherwise noted. "
           "Shippers will be notified of material changes affecting quoted rates."),
        _sub("C. Conflicting Provisions"),
        _p("In the event of conflict between the provisions of this tariff and any contract, "
           "agreement, or other document, the provisions most favorable to the shipper shall "
           "govern, unless specifically waived in writing by the shipper."),
    ),
)

DEFINITIONS_SECTION = SectionDefinition(
    item="110",
    title="DEFINITIONS",
    blocks=tuple(
        Paragraph(text=f"{term}: {definition}", style=ParagraphStyle.EMPHASIS)
        for term, definition in DEFINITIONS
    ),
)

SCOPE_SERVICES: tuple[ContentBlock, ...] = (
    _sub("A. Type of Service"),
    _p("The carrier provides the following types of service for the transportation of "
       "household goods:"),
    *_bullets(
        "Local moving services (within 50 miles)",
        "Long-distance moving services (over 50 miles)",
        "Packing and unpacking services",
        "Storage-in-transit services",
        "Special handling for high-value items",
    ),
    _sub("B. Excluded Items"),
    _p("The following items are excluded from transportation under this tariff unless "
       "specifically agreed upon in writing:"),
    *_bullets(
        "Hazardous materials as defined by DOT regulations",
        "Perishable goods",
        "Live plants and animals",
        "Currency, securities, precious metals, or jewelry exceeding $1,000 in value",
        "Items requiring special permits or licenses",
    ),
)

TRANSPORTATION_INCLUDES: tuple[str, ...] = (
    "Vehicle and driver for the entire journey from origin to destination",
    "Fuel for the vehicle (plus any applicable fuel surcharge)",
    "Moving equipment (dollies, hand trucks, straps, load bars)",
    "Moving blankets and basic padding for furniture protection",
    "Insurance coverage as required by federal regulations",
    "All highway tolls incurred during transportation",
)

TRANSPORTATION_EXCLUDES: tuple[str, ...] = (
    "Loading labor at origin (see Item 320)",
    "Unloading labor at destination (see Item 320)",
    "Packing and unpacking services (see Item 410)",
    "Storage-in-transit (see Item 420)",
    "Stair carry, long carry, and other accessorial services (see Items 430-440)",
    "Valuation coverage above the minimum (see Item 500)",
)

WEIGHING_RULES: tuple[ContentBlock, ...] = (
    _sub("Weight Determination"),
    _p("Origin Weigh: Vehicle weighed before loading (tare) and after loading (gross). "
       "Net weight = gross - tare."),
    _p("Destination Weigh: Loaded vehicle weighed on arrival (gross) and after unloading "
       "(tare). Net weight = gross - tare."),
    _p("Constructive Weight: For shipments under 1,000 lbs, 7 lbs per cubic foot of van "
       "space occupied."),
    _sub("Shipper's Right to Observe Weighing"),
    _p("The shipper or their representative has the right to observe all weighings. If you "
       "wish to observe the weighing, please inform the driver before loading begins."),
    _sub("Reweigh Requests"),
    _p("If you believe your shipment was weighed incorrectly, you have the right to request "
       "a reweigh before unloading. If the reweigh shows a difference of more than 100 "
       "pounds or 1% of the original weight (whichever is greater), the carrier will adjust "
       "the charges and bear the cost of the reweigh."),
)

LOADING_INCLUDES: tuple[str, ...] = (
    "Protecting floors, doorways, and banisters with padding materials",
    "Wrapping furniture with moving blankets and padding",
    "Disassembly of standard furniture (beds, tables, shelving units)",
    "Careful handling and loading of all household items onto the vehicle",
    "Securing items in the truck with straps and load bars",
    "Creating detailed inventory of all items loaded",
)

UNLOADING_INCLUDES: tuple[str, ...] = (
    "Protecting floors, doorways, and banisters at the new residence",
    "Carefully unloading all items from the vehicle",
    "Placing furniture and boxes in designated rooms as directed",
    "Reassembly of furniture that was disassembled at origin",
    "Unwrapping furniture and removing packing materials",
    "Final walkthrough with customer to verify delivery",
)

LABOR_EXCLUDES: tuple[str, ...] = (
    "Packing and unpacking of boxes (see Item 410)",
    "Stair carry charges for flights of stairs (see Item 430)",
    "Long carry charges for excessive walking distance (see Item 430)",
    "Disassembly/reassembly of specialty items (cribs, exercise equipment)",
    "Appliance servicing (disconnecting/reconnecting washers, dryers)",
    "Waiting time beyond 30 minutes due to customer delays",
)

PACKING_MATERIALS: tuple[tuple[str, str], ...] = (
    ("Small Box (1.5 cu ft)", "Quoted per unit"),
    ("Medium Box (3.0 cu ft)", "Quoted per unit"),
    ("Large Box (4.5 cu ft)", "Quoted per unit"),
    ("Wardrobe Box", "Quoted per unit"),
    ("Dish Pack Box", "Quoted per unit"),
    ("Packing Paper (25 lb bundle)", "Quoted per bundle"),
    ("Bubble Wrap (per roll)", "Quoted per roll"),
    ("Packing Tape (per roll)", "Quoted per roll"),
)

VALUATION = SectionDefinition(
    item="500",
    title="VALUATION AND LIABILITY",
    blocks=(
        _p("Federal law requires carriers to offer shippers the opportunity to select the "
           "level of carrier liability for loss or damage to their goods."),
        _sub("A. Shipper's Responsibility"),
        _p("It is the shipper's responsibility to:"),
        *_bullets(
            "Declare the value of the shipment before moving",
            "Select the appropriate level of liability coverage",
            "Sign the appropriate valuation declaration",
            "Understand the terms of the selected coverage",
        ),
        _sub("B. Carrier's Liability"),
        _p("The carrier's liability for loss or damage is limited to the valuation option "
           "selected by the shipper. The two options available are described in Items 510 "
           "and 520."),
    ),
)

RELEASED_VALUE = SectionDefinition(
    item="510",
    title="RELEASED VALUE",
    blocks=(
        _p("Released Value protection is the most economical option and is provided at no "
           "additional charge."),
        _sub("Coverage"),
        *_bullets(
            "Carrier liability: $0.60 per pound per article",
            "No additional charge for this coverage",
            "Example: A 50-pound item would have maximum coverage of $30.00",
        ),
        _sub("Limitations"),
        _p("This option does not provide full replacement value protection. Shippers with "
           "valuable items should consider Full Value Protection."),
    ),
)

FULL_VALUE = SectionDefinition(
    item="520",
    title="FULL VALUE PROTECTION",
    blocks=(
        _p("Full Value Protection (FVP) provides comprehensive coverage for loss or damage to "
           "your shipment."),
        _sub("Coverage"),
        *_bullets(
            "Carrier will repair, replace, or provide cash settlement for lost/damaged items",
            "Minimum valuation: $6.00 per pound multiplied by shipment weight",
            "Higher declared values available at additional cost",
        ),
        _sub("Cost"),
        _p("Full Value Protection is charged based on the declared value of the shipment. "
           "Deductible options may reduce premium cost and are disclosed on the estimate."),
    ),
)

CLAIMS = SectionDefinition(
    item="600",
    title="CLAIMS PROCEDURES",
    blocks=(
        _p("In the event of loss or damage to your shipment, the following procedures apply:"),
        _sub("A. Filing a Claim"),
        *_bullets(
            "Notify the carrier of any loss or damage at time of delivery",
            "Note all damage on the delivery receipt/inventory",
            "File a written claim within 9 months of delivery",
            "Include documentation: photos, receipts, repair estimates",
        ),
        _sub("B. Carrier Response"),
        _p("Upon receipt of a claim, the carrier will:"),
        *_bullets(
            "Acknowledge receipt within 30 days",
            "Complete investigation of the claim",
            "Pay, decline, or make settlement offer within 120 days",
        ),
        _sub("C. Arbitration"),
        _p("If you are not satisfied with the carrier's response, you may request "
           "arbitration. For claims of $10,000 or less, the carrier must participate in "
           "binding arbitration if you request it."),
    ),
)

PAYMENT_TERMS = SectionDefinition(
    item="700",
    title="PAYMENT TERMS",
    blocks=(
        _sub("A. Payment Due"),
        _p("Payment of all charges is due upon delivery unless credit has been arranged in "
           "advance. The carrier reserves the right to require payment before unloading."),
        _sub("B. Accepted Payment Methods"),
        *_bullets(
            "Cash or certified check",
            "Credit card (Visa, MasterCard, American Express, Discover)",
            "Personal check (with prior approval and valid ID)",
            "Money order or cashier's check",
        ),
        _sub("C. Charges Subject to Collection"),
        _p("If payment is not received, the carrier may:"),
        *_bullets(
            "Place goods in storage at shipper's expense",
            "Assess storage and redelivery charges",
            "Exercise carrier's lien rights under applicable law",
        ),
        _sub("D. Binding vs. Non-Binding Estimates"),
        _p("BINDING ESTIMATE: The total charges will not exceed the estimate amount, provided "
           "there are no changes to the services requested."),
        _p("NON-BINDING ESTIMATE: Actual charges may vary based on actual weight and "
           "services. Federal law limits collect-on-delivery charges to the estimate plus "
           "10% on non-binding estimates."),
    ),
)

DISCLOSURES = SectionDefinition(
    item="800",
    title="CUSTOMER DISCLOSURES",
    blocks=(
        _p("Federal regulations require the carrier to provide the following documents to "
           "all shippers:"),
        _sub("A. Required Documents"),
        *_bullets(
            '"Your Rights and Responsibilities When You Move" booklet',
            "Written estimate of charges",
            "Order for Service",
            "Bill of Lading",
            "Inventory of items",
            "Arbitration information",
        ),
        _sub("B. Before the Move"),
        _p("Before loading, the carrier will provide a written estimate and explain valuation "
           "options. The shipper must sign the valuation declaration and receive a copy of "
           "all documents."),
        _sub("C. At Delivery"),
        _p("At delivery, the shipper should:"),
        *_bullets(
            "Be present or have an authorized representative present",
            "Verify inventory and note any loss or damage",
            "Sign delivery documents",
            "Make payment as agreed",
        ),
    ),
)

GENERAL_RULES = SectionDefinition(
    item="900",
    title="GENERAL RULES",
    blocks=(
        _sub("A. Carrier's Equipment"),
        _p("The carrier provides all necessary equipment for a standard residential move, "
           "including the moving vehicle, dollies, blankets, and hand tools. Specialty "
           "equipment may incur additional charges."),
        _sub("B. Access Requirements"),
        _p("The shipper is responsible for ensuring adequate access for the carrier's "
           "vehicles and equipment. Parking permits, building access, and elevator "
           "reservations are the shipper's responsibility."),
        _sub("C. Items Prepared by Shipper"),
        _p("Items packed by the shipper (PBO - Packed By Owner) are transported at owner's "
           "risk unless damage to the container is evident. The carrier is not liable for "
           "damage to contents of PBO containers."),
        _sub("D. Appliances"),
        _p("The shipper is responsible for preparing appliances for transport (disconnecting, "
           "draining, securing drums) unless the carrier is contracted to provide this "
           "service."),
        _sub("E. Delays"),
        _p("The carrier is not responsible for delays caused by weather, road conditions, "
           "mechanical failure, or other circumstances beyond its control. The carrier will "
           "make reasonable efforts to notify the shipper of delays."),
        _sub("F. Amendment"),
        _p("This tariff may be amended at any time. The current version supersedes all "
           "previous versions."),
    ),
)

# Items that follow the rate and accessorial items, in publication order
CLOSING_SECTIONS: tuple[SectionDefinition, ...] = (
    VALUATION,
    RELEASED_VALUE,
    FULL_VALUE,
    CLAIMS,
    PAYMENT_TERMS,
    DISCLOSURES,
    GENERAL_RULES,
)

ACKNOWLEDGMENT: tuple[ContentBlock, ...] = (
    Heading(text="TARIFF ACKNOWLEDGMENT", new_page=True),
    _p("This tariff has been prepared for:"),
    Paragraph(text="{company_name}", style=ParagraphStyle.EMPHASIS),
    _p("MC Number: {mc_number}"),
    _p("USDOT Number: {usdot_number}"),
    _p("This tariff is the official rate schedule for the carrier identified above and is "
       "published in compliance with federal regulations. The carrier agrees to:"),
    *_bullets(
        "Maintain this tariff and make it available for customer inspection upon request",
        "Provide customers with accurate estimates based on these published rates",
        "File amendments when rates or services change",
        "Perform all services in accordance with applicable FMCSA regulations",
    ),
)

SIGNATURE_LINES: tuple[tuple[str, str], ...] = (
    ("Authorized Signature", "_______________________________"),
    ("Printed Name", "_______________________________"),
    ("Title", "_______________________________"),
    ("Date", "_______________________________"),
)
