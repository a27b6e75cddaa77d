from zigscan.core.use_cases.assemble import assemble_record, resolve_fee, resolve_status

__all__ = ["assemble_record", "resolve_fee", "resolve_status"]
