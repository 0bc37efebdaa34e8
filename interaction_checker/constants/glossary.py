SECTION_LABELS = {
    "boxed_warning": ("Boxed warning", "The most serious warning the FDA requires on a label."),
    "indications_and_usage": ("Indications and usage", "Conditions the drug is approved to treat."),
    "dosage_and_administration": ("Dosage and administration", "Approved dosing as printed on the label."),
    "dosage_forms_and_strengths": ("Dosage forms and strengths", "Available formulations and strengths."),
    "contraindications": ("Contraindications", "Situations where the drug should not be used."),
    "warnings_and_cautions": ("Warnings and precautions", "Clinically significant adverse reactions and risks."),
    "warnings": ("Warnings", "Warnings section (older label format)."),
    "drug_interactions": ("Drug interactions", "Narrative text describing interactions with other drugs."),
    "adverse_reactions": ("Adverse reactions", "Undesirable effects reported with use of the drug."),
    "mechanism_of_action": ("Mechanism of action", "How the drug produces its effect."),
    "use_in_specific_populations": ("Use in specific populations", "Pregnancy, lactation, pediatric, geriatric and organ impairment."),
}

OPENFDA_FIELD_LABELS = {
    "brand_name": "Brand name",
    "generic_name": "Generic name",
    "manufacturer_name": "Manufacturer",
    "rxcui": "RxCUI",
    "route": "Route",
}
