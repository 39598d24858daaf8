from .acquisition_service import VocabularyAcquisitionService

__all__ = ['VocabularyAcquisitionService']
