from django.urls import path
from . import views

urlpatterns = [
    # Clarifications
    path('Clarifications/GetAll', views.clarification_list, name='clarification-list'),
    path('Clarifications/GetClarification/<int:pk>', views.clarification_get, name='clarification-get'),
    path('Clarifications/Export', views.clarification_export, name='clarification-export'),
    path('Clarifications', views.clarification_create, name='clarification-create'),
    path('Clarifications/<int:pk>', views.clarification_detail, name='clarification-detail'),

    # Quick notes
    path('ClarificationQuickNotes/GetClarificationQuickNotesWithClarificationId/<int:clarification_id>',
         views.quick_notes_by_clarification, name='clarification-quick-notes-by-clarification'),
    path('ClarificationQuickNotes', views.quick_note_create, name='clarification-quick-note-create'),
    path('ClarificationQuickNotes/<int:pk>', views.quick_note_detail, name='clarification-quick-note-detail'),

    # Attachments
    path('ClarificationFileUploads/GetClarificationFileUploadWithClarificationId/<int:clarification_id>',
         views.files_by_clarification, name='clarification-files-by-clarification'),
    path('ClarificationFileUploads', views.file_upload, name='clarification-file-upload'),
    path('ClarificationFileUploads/<int:pk>', views.file_detail, name='clarification-file-detail'),
]
